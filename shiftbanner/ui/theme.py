"""
Theme - Per-shift colors and banner art
"""
from typing import Dict, NamedTuple, Tuple

from ..core.shift_clock import Shift


class ShiftColors(NamedTuple):
    """
    The three representative colors of a banner.

    background fills the area the banner doesn't cover and doubles as the
    primary ambient color.
    """
    background: str
    secondary: str
    tertiary: str


class ShiftArt(NamedTuple):
    """Everything needed to draw one shift"""
    title: str
    asset_id: str
    colors: ShiftColors


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """'#rrggbb' -> (r, g, b)"""
    value = color.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Not a hex color: {color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


class Theme:
    """
    Banner theme configuration.
    """

    # Window background before the first frame
    BG_PRIMARY = '#000000'

    STANDARD_ART: Dict[Shift, ShiftArt] = {
        Shift.ZETASHIFT: ShiftArt(
            'Zeta Shift', 'dbzetashift',
            ShiftColors('#3b2a6b', '#8e7cc3', '#ffffff')),
        Shift.DAWNGUARD: ShiftArt(
            'Dawn Guard', 'dbdawnguard',
            ShiftColors('#f7a33a', '#d65a1f', '#ffd54f')),
        Shift.ALPHAFLIGHT: ShiftArt(
            'Alpha Flight', 'dbalphaflight',
            ShiftColors('#c1272d', '#f4a6a8', '#ffffff')),
        Shift.NIGHTWATCH: ShiftArt(
            'Night Watch', 'dbnightwatch',
            ShiftColors('#0f2a5c', '#6fa8dc', '#cfe2f3')),
        Shift.OMEGASHIFT: ShiftArt(
            'Omega Shift', 'dbomegashift',
            ShiftColors('#1a1a1a', '#6fa8dc', '#ffffff')),
    }

    # Rustproof Bee Shed replacements
    BEE_SHED_ART: Dict[Shift, ShiftArt] = {
        Shift.ALPHAFLIGHT: ShiftArt(
            'Beta Flight', 'dbbetaflight',
            ShiftColors('#2e7d32', '#81c784', '#c5e1a5')),
        Shift.NIGHTWATCH: ShiftArt(
            'Dusk Guard', 'dbduskguard',
            ShiftColors('#4a235a', '#e67e22', '#f4d03f')),
    }

    VINTAGE_OMEGA_ART = ShiftArt(
        'Omega Shift', 'dbomegashift_vintage',
        STANDARD_ART[Shift.OMEGASHIFT].colors)

    @staticmethod
    def art_for(shift: Shift, bee_shed: bool = False, vintage_omega: bool = False) -> ShiftArt:
        """
        Get banner art for a shift.

        Args:
            shift: Any real shift
            bee_shed: Use the Rustproof Bee Shed variants
            vintage_omega: Use the older Omega Shift banner

        Returns:
            ShiftArt for the shift

        Raises:
            KeyError: For Shift.UNSET, which has no art
        """
        if bee_shed and shift in Theme.BEE_SHED_ART:
            return Theme.BEE_SHED_ART[shift]
        if vintage_omega and shift is Shift.OMEGASHIFT:
            return Theme.VINTAGE_OMEGA_ART
        return Theme.STANDARD_ART[shift]


_missing = set(Shift.real_shifts()) - set(Theme.STANDARD_ART)
if _missing:
    raise RuntimeError(f"No banner art for {sorted(s.name for s in _missing)}")
