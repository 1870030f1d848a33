"""
Display Info - Screen resolution detection
"""
import tkinter as tk
from typing import Optional, Tuple

from ..core.logging_service import get_logger


# Used when nothing can be detected
FALLBACK_SIZE = (800, 480)


class DisplayInfo:
    """
    Screen resolution detection.
    """

    def __init__(self):
        """Initialize display info detector"""
        self._screen_width: Optional[int] = None
        self._screen_height: Optional[int] = None
        self._detected: bool = False

    def detect(self) -> Tuple[int, int]:
        """
        Detect screen resolution using Tkinter.

        Returns:
            Tuple of (width, height) in pixels
        """
        if self._detected and self._screen_width and self._screen_height:
            return (self._screen_width, self._screen_height)

        try:
            # Create temporary root window to query screen size
            root = tk.Tk()
            root.withdraw()

            self._screen_width = root.winfo_screenwidth()
            self._screen_height = root.winfo_screenheight()

            root.destroy()
            self._detected = True

            return (self._screen_width, self._screen_height)

        except tk.TclError as e:
            get_logger().warning(f"Display detection failed, using {FALLBACK_SIZE[0]}x{FALLBACK_SIZE[1]}: {e}")
            return FALLBACK_SIZE

    def resolve(self, width: int, height: int) -> Tuple[int, int]:
        """
        Use configured dimensions, detecting any that are 0.

        Args:
            width: Configured width (0 to detect)
            height: Configured height (0 to detect)

        Returns:
            Tuple of (width, height)
        """
        if width > 0 and height > 0:
            return (width, height)
        detected_width, detected_height = self.detect()
        return (width or detected_width, height or detected_height)

    def __str__(self) -> str:
        width, height = self.detect()
        return f"{width}x{height}"
