"""
Render Scheduler - Wakes, paints and reschedules the shift banner
"""
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional

from .crossfade import CrossfadeState, RenderPlan
from .dispatcher import Dispatcher
from .logging_service import LoggingService, get_logger
from .omega_poller import OmegaPoller
from .shift_clock import Shift, ShiftClock


# Time between frames during a fade (30 fps).
FRAME_INTERVAL = timedelta(milliseconds=1000 // 30)


class BannerNotFoundError(Exception):
    """The banner art for a shift could not be loaded."""


class RenderScheduler:
    """
    Drives one display surface.

    Each wake resolves the shift, advances the crossfade, paints one frame
    and schedules exactly one follow-up wake. Nothing is scheduled while the
    surface is hidden.

    The surface must provide lock_frame() -> frame or None and
    present_frame(frame). The painter must provide paint(frame, plan) and
    colors_for(shift) -> ShiftColors.
    """

    def __init__(
        self,
        surface,
        painter,
        poller: OmegaPoller,
        clock: ShiftClock,
        dispatcher: Dispatcher,
        frame_interval: timedelta = FRAME_INTERVAL,
        logger: Optional[LoggingService] = None
    ):
        """
        Initialize render scheduler.

        Args:
            surface: Render target
            painter: Draws a RenderPlan onto a frame
            poller: Omega Shift poller (outlives this scheduler)
            clock: Shift clock
            dispatcher: Dispatcher all callbacks run on
            frame_interval: Delay between fade frames
            logger: Logging service
        """
        self._surface = surface
        self._painter = painter
        self._poller = poller
        self._clock = clock
        self._dispatcher = dispatcher
        self._frame_interval = frame_interval
        self._logger = logger or get_logger()

        self._crossfade = CrossfadeState(logger=self._logger)
        self._visible = False
        self._wake_token: Any = None
        self._next_delay: Optional[timedelta] = None
        self._palette_listeners: List[Callable] = []

    # Lifecycle

    def on_attach(self) -> None:
        """A new surface exists; it has no visual history"""
        self._logger.info("Surface attached")
        self._crossfade.reset()
        self._visible = True
        self._poller.add_listener(self._on_override_changed)
        self.on_wake()
        self._poller.maybe_check()

    def on_detach(self) -> None:
        """The surface is gone; stop every callback"""
        self._logger.info("Surface detached")
        self._visible = False
        self._cancel_wake()
        self._poller.remove_listener(self._on_override_changed)
        self._poller.cancel_all()

    def on_visibility_change(self, visible: bool) -> None:
        """Start drawing if visible, stop callbacks if not"""
        if visible == self._visible:
            return
        self._visible = visible
        self._logger.debug(f"Visibility changed: {'visible' if visible else 'hidden'}")
        if visible:
            self.on_wake()
            self._poller.maybe_check()
        else:
            self._cancel_wake()
            self._poller.cancel_pending()

    def on_geometry_change(self) -> None:
        """The surface was resized or rotated; treat it as a new surface"""
        self._logger.debug("Surface geometry changed")
        self._crossfade.reset()
        self._cancel_wake()
        self._poller.cancel_pending()
        if self._visible:
            self.on_wake()
            self._poller.maybe_check()

    # Palette notifications

    def add_palette_listener(self, callback: Callable) -> None:
        """
        Register a callback invoked with ShiftColors whenever a settle
        completes.
        """
        self._palette_listeners.append(callback)

    def remove_palette_listener(self, callback: Callable) -> None:
        if callback in self._palette_listeners:
            self._palette_listeners.remove(callback)

    # Waking

    def on_wake(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """
        Paint one frame and schedule the next wake.

        Args:
            now: Current instant (default: clock.now())

        Returns:
            Delay until the next wake, or None if nothing was scheduled
        """
        # A wake may be requested directly while a timed one is pending.
        self._cancel_wake()
        if now is None:
            now = self._clock.now()

        override = self._poller.override_active
        shift = self._clock.resolve(now, override)
        self._logger.debug(f"Wake: {self._crossfade!r}, shift is {shift.name}")

        plan = self._crossfade.advance(shift, now)
        self._paint(plan)

        if plan.settled_now:
            self._notify_palette()

        if plan.fading:
            delay = self._frame_interval
        else:
            delay = self._clock.delay_until_next_hour(now)
        self._next_delay = delay

        if not self._visible:
            return None

        self._logger.debug(f"Scheduling next draw in {delay.total_seconds() * 1000:.0f}ms")
        self._wake_token = self._dispatcher.post(self._on_timer, delay.total_seconds())
        return delay

    def _on_timer(self) -> None:
        self._wake_token = None
        self.on_wake()

    def _on_override_changed(self, active: bool) -> None:
        self._logger.debug(f"Override changed to {active}, redrawing")
        if self._visible:
            self.on_wake()

    def _cancel_wake(self) -> None:
        if self._wake_token is not None:
            self._dispatcher.cancel(self._wake_token)
            self._wake_token = None

    def _paint(self, plan: RenderPlan) -> None:
        frame = self._surface.lock_frame()
        if frame is None:
            self._logger.debug("No drawable frame available, skipping paint")
            return
        try:
            self._painter.paint(frame, plan)
        except BannerNotFoundError as e:
            self._logger.error(f"Skipping frame: {e}")
        finally:
            self._surface.present_frame(frame)

    def _notify_palette(self) -> None:
        shift = self._crossfade.last_drawn
        if self._crossfade.is_fading or shift is Shift.UNSET:
            return
        colors = self._painter.colors_for(shift)
        for listener in list(self._palette_listeners):
            listener(colors)

    # Introspection

    @property
    def crossfade(self) -> CrossfadeState:
        return self._crossfade

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def next_delay(self) -> Optional[timedelta]:
        """Delay chosen by the most recent wake"""
        return self._next_delay
