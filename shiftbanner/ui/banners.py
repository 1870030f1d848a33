"""
Banners - Loading and rendering shift banner images
"""
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..core.logging_service import LoggingService, get_logger
from ..core.render_scheduler import BannerNotFoundError
from .theme import ShiftArt, hex_to_rgb


# Intrinsic size of the built-in banners (width, height).
BANNER_SIZE = (600, 1000)


def render_banner(art: ShiftArt, size: Tuple[int, int] = BANNER_SIZE) -> Image.Image:
    """
    Draw a hanging banner for a shift from its palette.

    Args:
        art: Shift art with title and colors
        size: (width, height) of the image

    Returns:
        RGBA image; the swallowtail notch at the bottom is transparent
    """
    width, height = size
    background = hex_to_rgb(art.colors.background)
    secondary = hex_to_rgb(art.colors.secondary)
    tertiary = hex_to_rgb(art.colors.tertiary)

    image = Image.new('RGBA', size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    notch = height // 8
    trim = max(2, width // 24)

    # Body: background on top, secondary below, cut into a swallowtail.
    body = [(0, 0), (width, 0), (width, height), (width // 2, height - notch), (0, height)]
    draw.polygon(body, fill=background + (255,))
    lower = [(0, height // 2), (width, height // 2), (width, height),
             (width // 2, height - notch), (0, height)]
    draw.polygon(lower, fill=secondary + (255,))

    # Trim down both edges and across the top.
    draw.rectangle([0, 0, trim - 1, height], fill=tertiary + (255,))
    draw.rectangle([width - trim, 0, width - 1, height], fill=tertiary + (255,))
    draw.rectangle([0, 0, width - 1, trim - 1], fill=tertiary + (255,))

    # Title in the middle of the upper field.
    font = ImageFont.load_default()
    text_box = draw.textbbox((0, 0), art.title.upper(), font=font)
    text_w = text_box[2] - text_box[0]
    text_h = text_box[3] - text_box[1]
    draw.text(((width - text_w) // 2, height // 4 - text_h // 2), art.title.upper(),
              font=font, fill=tertiary + (255,))

    # Cut the notch back out so the surface shows through.
    draw.polygon([(0, height), (width // 2, height - notch), (width, height)], fill=(0, 0, 0, 0))
    return image


class BannerStore:
    """
    Supplies banner images by asset id, cached after first use.

    With a directory configured, banners are read from <directory>/<asset_id>.png
    and a missing file is an error. Without one, the built-in art is drawn.
    """

    def __init__(self, directory: str = '', logger: Optional[LoggingService] = None):
        self._directory = Path(directory) if directory else None
        self._logger = logger or get_logger()
        self._cache: Dict[str, Image.Image] = {}

    def get(self, art: ShiftArt) -> Image.Image:
        """
        Get the banner image for a shift.

        Raises:
            BannerNotFoundError: If the configured banner file is missing or unreadable
        """
        image = self._cache.get(art.asset_id)
        if image is None:
            image = self._load(art)
            self._cache[art.asset_id] = image
        return image

    def _load(self, art: ShiftArt) -> Image.Image:
        if self._directory is None:
            self._logger.debug(f"Rendering built-in banner {art.asset_id}")
            return render_banner(art)

        path = self._directory / f"{art.asset_id}.png"
        if not path.exists():
            raise BannerNotFoundError(f"Banner {art.asset_id} not found at {path}")
        try:
            with Image.open(path) as img:
                image = img.convert('RGBA')
        except OSError as e:
            raise BannerNotFoundError(f"Banner {art.asset_id} could not be read: {e}") from e
        self._logger.debug(f"Loaded banner {art.asset_id} from {path} ({image.width}x{image.height})")
        return image
