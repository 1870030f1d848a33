"""
Layout - Banner placement on the display surface
"""
from typing import NamedTuple


class Bounds(NamedTuple):
    """Pixel rectangle, right/bottom exclusive"""
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top


class Layout:
    """
    Manages banner positioning for a given surface size.
    """

    def __init__(self, width: int, height: int):
        """
        Initialize layout manager.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
        """
        self._width = width
        self._height = height

    def banner_bounds(self, asset_width: int, asset_height: int) -> Bounds:
        """
        Scale a banner to the full surface height and center it horizontally.

        The banner keeps its aspect ratio; on a surface narrower than the
        scaled banner, left comes out negative and the sides get cropped.

        Args:
            asset_width: Intrinsic banner width
            asset_height: Intrinsic banner height

        Returns:
            Bounds of the scaled banner in surface coordinates
        """
        if asset_width <= 0 or asset_height <= 0:
            raise ValueError(f"Invalid banner size: {asset_width}x{asset_height}")

        aspect = asset_width / asset_height
        new_width = round(self._height * aspect)
        left = (self._width - new_width) // 2
        return Bounds(left, 0, left + new_width, self._height)
