"""
Canvas Surface - Off-screen frames the painter draws into
"""
from dataclasses import dataclass
from typing import Callable, Optional

from PIL import Image

from .theme import Theme, hex_to_rgb


@dataclass
class Frame:
    """A drawable frame backed by an RGBA image"""
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class ImageSurface:
    """
    Render target producing Pillow frames.

    Only one frame can be locked at a time; lock_frame() returns None while
    a frame is out or while the surface has no area.
    """

    def __init__(self, width: int, height: int,
                 on_present: Optional[Callable[[Image.Image], None]] = None):
        """
        Args:
            width: Surface width in pixels
            height: Surface height in pixels
            on_present: Called with each presented image
        """
        self._width = width
        self._height = height
        self._on_present = on_present
        self._locked: Optional[Frame] = None
        self.presented = 0

    def lock_frame(self) -> Optional[Frame]:
        if self._locked is not None or self._width <= 0 or self._height <= 0:
            return None
        background = hex_to_rgb(Theme.BG_PRIMARY) + (255,)
        self._locked = Frame(Image.new('RGBA', (self._width, self._height), background))
        return self._locked

    def present_frame(self, frame: Frame) -> None:
        if frame is not self._locked:
            raise ValueError("Presenting a frame that was not locked from this surface")
        self._locked = None
        self.presented += 1
        if self._on_present:
            self._on_present(frame.image)

    def resize(self, width: int, height: int) -> bool:
        """
        Change the surface size.

        Returns:
            True if the size actually changed
        """
        if (width, height) == (self._width, self._height):
            return False
        self._width = width
        self._height = height
        return True
