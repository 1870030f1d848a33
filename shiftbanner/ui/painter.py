"""
Painter - Draws render plans onto frames
"""
from typing import Optional

from PIL import Image

from ..core.crossfade import RenderPlan, clamp01
from ..core.logging_service import LoggingService, get_logger
from ..core.preferences import Preferences
from ..core.shift_clock import Shift
from .banners import BannerStore
from .canvas_surface import Frame
from .layout import Layout
from .theme import ShiftArt, ShiftColors, Theme, hex_to_rgb


class BannerPainter:
    """
    Paints shift banners: a full-frame background wash, then the banner
    scaled to the frame height and centered, both at the layer's alpha.
    """

    def __init__(self, banners: BannerStore, preferences: Preferences,
                 logger: Optional[LoggingService] = None):
        self._banners = banners
        self._preferences = preferences
        self._logger = logger or get_logger()

    def art_for(self, shift: Shift) -> ShiftArt:
        return Theme.art_for(shift,
                             bee_shed=self._preferences.bee_shed,
                             vintage_omega=self._preferences.vintage_omega)

    def colors_for(self, shift: Shift) -> ShiftColors:
        """Ambient colors for a settled shift"""
        return self.art_for(shift).colors

    def paint(self, frame: Frame, plan: RenderPlan) -> None:
        """
        Paint each layer of the plan, bottom first.

        Raises:
            BannerNotFoundError: If a banner can't be loaded; layers already
                painted stay on the frame
        """
        for layer in plan.layers:
            art = self.art_for(layer.shift)
            self.fill_background(frame, art.colors.background, layer.alpha)
            self.draw_banner(frame, art, layer.alpha)

    def fill_background(self, frame: Frame, color: str, alpha: float) -> None:
        """Flood the whole frame with color at alpha"""
        alpha = clamp01(alpha)
        if alpha == 0.0:
            return
        overlay = Image.new('RGBA', frame.image.size, hex_to_rgb(color) + (round(255 * alpha),))
        frame.image.alpha_composite(overlay)

    def draw_banner(self, frame: Frame, art: ShiftArt, alpha: float) -> None:
        """Draw the banner for art at alpha, filling the frame height"""
        alpha = clamp01(alpha)
        image = self._banners.get(art)
        if alpha == 0.0:
            return

        bounds = Layout(frame.width, frame.height).banner_bounds(image.width, image.height)
        if bounds.width <= 0 or bounds.height <= 0:
            return

        scaled = image.resize((bounds.width, bounds.height), Image.LANCZOS)
        if alpha < 1.0:
            faded = scaled.getchannel('A').point(lambda value: round(value * alpha))
            scaled.putalpha(faded)

        # alpha_composite() won't take a negative destination, so crop instead.
        source_left = max(0, -bounds.left)
        dest_left = max(0, bounds.left)
        visible_width = min(bounds.width - source_left, frame.width - dest_left)
        if visible_width <= 0:
            self._logger.debug(f"Banner {art.asset_id} falls outside the {frame.width}x{frame.height} frame")
            return
        frame.image.alpha_composite(
            scaled,
            dest=(dest_left, bounds.top),
            source=(source_left, 0, source_left + visible_width, bounds.height)
        )
