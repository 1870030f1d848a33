"""
Main Window - Tkinter display surface for the shift banner
"""
import tkinter as tk
from typing import Optional

from PIL import Image, ImageTk

from ..core.logging_service import LoggingService
from ..core.omega_poller import OmegaPoller
from ..core.render_scheduler import RenderScheduler
from ..core.shift_clock import ShiftClock
from .canvas_surface import ImageSurface
from .painter import BannerPainter
from .theme import ShiftColors, Theme
from .tk_dispatcher import TkDispatcher


class TkCanvasSurface(ImageSurface):
    """
    Image surface whose presented frames are shown on a Tk canvas.
    """

    def __init__(self, canvas: tk.Canvas, width: int, height: int):
        super().__init__(width, height, on_present=self._show)
        self._canvas = canvas
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._image_id = canvas.create_image(0, 0, anchor='nw')

    def _show(self, image: Image.Image) -> None:
        # Keep a reference or Tk drops the image.
        self._photo = ImageTk.PhotoImage(image)
        self._canvas.itemconfig(self._image_id, image=self._photo)


class MainWindow:
    """
    Main Tkinter window for the shift banner.

    Window events are translated into the render scheduler's lifecycle:
    mapping and unmapping toggle visibility, a size change counts as a new
    surface, and closing the window detaches it.
    """

    def __init__(
        self,
        clock: ShiftClock,
        painter: BannerPainter,
        poller_factory,
        logger: LoggingService,
        width: int = 800,
        height: int = 480,
        fullscreen: bool = True
    ):
        """
        Initialize main window.

        Args:
            clock: Shift clock
            painter: Banner painter
            poller_factory: Callable(dispatcher) -> OmegaPoller
            logger: Logging service
            width: Window width
            height: Window height
            fullscreen: Whether to run fullscreen
        """
        self._clock = clock
        self._painter = painter
        self._poller_factory = poller_factory
        self._logger = logger

        self._width = width
        self._height = height
        self._fullscreen = fullscreen

        self._root: Optional[tk.Tk] = None
        self._canvas: Optional[tk.Canvas] = None
        self._surface: Optional[TkCanvasSurface] = None
        self._dispatcher: Optional[TkDispatcher] = None
        self._poller: Optional[OmegaPoller] = None
        self._scheduler: Optional[RenderScheduler] = None
        self._running = False

    def initialize(self) -> None:
        """Initialize Tkinter window, canvas and scheduler"""
        self._logger.info("Initializing UI window")

        self._root = tk.Tk()
        self._root.title("Shift Banner")
        self._root.configure(bg=Theme.BG_PRIMARY)

        if self._fullscreen:
            self._root.attributes('-fullscreen', True)
            self._root.config(cursor='none')  # Hide cursor in fullscreen
        else:
            self._root.geometry(f"{self._width}x{self._height}")

        self._canvas = tk.Canvas(
            self._root,
            width=self._width,
            height=self._height,
            bg=Theme.BG_PRIMARY,
            highlightthickness=0
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)

        self._surface = TkCanvasSurface(self._canvas, self._width, self._height)
        self._dispatcher = TkDispatcher(self._root)
        self._poller = self._poller_factory(self._dispatcher)
        self._scheduler = RenderScheduler(
            surface=self._surface,
            painter=self._painter,
            poller=self._poller,
            clock=self._clock,
            dispatcher=self._dispatcher,
            logger=self._logger
        )
        self._scheduler.add_palette_listener(self._on_palette_changed)

        self._root.bind('<Map>', self._on_map)
        self._root.bind('<Unmap>', self._on_unmap)
        self._canvas.bind('<Configure>', self._on_configure)
        self._root.bind('<Escape>', self._exit_fullscreen)
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        self._logger.info(f"UI initialized: {self._width}x{self._height}")

    def _on_map(self, event) -> None:
        if event.widget is self._root and self._running:
            self._scheduler.on_visibility_change(True)

    def _on_unmap(self, event) -> None:
        if event.widget is self._root and self._running:
            self._scheduler.on_visibility_change(False)

    def _on_configure(self, event) -> None:
        if self._surface.resize(event.width, event.height):
            self._logger.debug(f"Canvas resized to {event.width}x{event.height}")
            if self._running:
                self._scheduler.on_geometry_change()

    def _on_palette_changed(self, colors: ShiftColors) -> None:
        self._logger.info(
            f"Palette changed: primary={colors.background}, "
            f"secondary={colors.secondary}, tertiary={colors.tertiary}"
        )
        self._root.configure(bg=colors.background)

    def _exit_fullscreen(self, event=None) -> None:
        """Exit fullscreen mode"""
        if self._root and self._fullscreen:
            self._root.attributes('-fullscreen', False)
            self._root.config(cursor='')
            self._fullscreen = False
            self._logger.info("Exited fullscreen mode")

    def start(self) -> None:
        """Start UI event loop"""
        if not self._root:
            self.initialize()

        self._logger.info("Starting UI event loop")
        self._running = True
        self._dispatcher.start()
        self._root.after(0, self._scheduler.on_attach)

        self._root.mainloop()

    def stop(self) -> None:
        """Stop UI and cleanup"""
        self._logger.info("Stopping UI")
        was_running = self._running
        self._running = False

        if self._scheduler and was_running:
            self._scheduler.on_detach()
        if self._dispatcher:
            self._dispatcher.stop()

        if self._root:
            try:
                self._root.quit()
                self._root.destroy()
            except tk.TclError as e:
                self._logger.error(f"Error during UI cleanup: {e}")

        self._root = None

    def is_running(self) -> bool:
        """Check if UI is running"""
        return self._running
