"""
Omega Poller - Debounced, cancellable Omega Shift checks
Handles the network probe on a worker thread and reports back through
the dispatcher inbox
"""
import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, List, Optional

import requests

from .dispatcher import Dispatcher
from .logging_service import LoggingService, get_logger


OMEGA_CHECK_URL = 'http://vst.ninja/Resources/isitomegashift.html'

# Minimum time between checks.
MIN_INTERVAL = timedelta(minutes=10)

# Hard limit on a single probe before it is aborted.
PROBE_TIMEOUT = 10.0

# Omega Shift can only happen during the run, which is in November.
ACTIVE_MONTH = 11

# Anything longer than this is not a one-character answer.
MAX_BODY = 16


class ProbeError(Exception):
    """The check endpoint answered with something other than '0' or '1'."""


class ProbeHandle:
    """
    One in-flight probe.

    Completion and cancellation race; whichever gets here first wins and the
    other becomes a no-op. Cancelling also closes whatever network resources
    the worker attached so a blocked request is torn down.
    """

    _ids = itertools.count(1)

    def __init__(self):
        self.id = next(self._ids)
        self._lock = threading.Lock()
        self._cancelled = False
        self._finished = False
        self._resources: List[Any] = []

    def attach(self, resource: Any) -> None:
        """Register something with a close() method to abort on cancel"""
        with self._lock:
            if not self._cancelled:
                self._resources.append(resource)
                return
        _close_quietly(resource)

    def cancel(self) -> bool:
        """
        Cancel the probe.

        Returns:
            True if this call won the race, False if already cancelled or done
        """
        with self._lock:
            if self._cancelled or self._finished:
                return False
            self._cancelled = True
            resources, self._resources = self._resources, []
        for resource in resources:
            _close_quietly(resource)
        return True

    def finish(self) -> bool:
        """
        Mark the probe complete.

        Returns:
            True if the result may be used, False if cancellation got there first
        """
        with self._lock:
            if self._cancelled:
                return False
            self._finished = True
            self._resources = []
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"ProbeHandle(id={self.id}, cancelled={self._cancelled}, finished={self._finished})"


def _close_quietly(resource: Any) -> None:
    try:
        resource.close()
    except Exception as e:  # closing from another thread can fail in odd ways
        get_logger().debug(f"Error closing aborted probe resource: {e}")


class ProbeOutcome(Enum):
    SUCCEEDED = 'succeeded'
    CANCELLED = 'cancelled'
    FAILED = 'failed'


@dataclass(frozen=True)
class ProbeResult:
    """Message a probe worker posts back to the dispatch thread"""
    handle: ProbeHandle
    outcome: ProbeOutcome
    override_value: Optional[bool] = None
    reason: str = ''

    @classmethod
    def succeeded(cls, handle: ProbeHandle, value: bool) -> 'ProbeResult':
        return cls(handle, ProbeOutcome.SUCCEEDED, override_value=value)

    @classmethod
    def cancelled(cls, handle: ProbeHandle) -> 'ProbeResult':
        return cls(handle, ProbeOutcome.CANCELLED, reason='cancelled')

    @classmethod
    def failed(cls, handle: ProbeHandle, reason: str) -> 'ProbeResult':
        return cls(handle, ProbeOutcome.FAILED, reason=reason)


@dataclass
class OmegaPollState:
    """
    Poll state that outlives any one display surface.

    Attributes:
        override_active: Whether Omega Shift is currently called
        last_checked_at: When the last check started (None if never)
        in_flight: The running probe, if any
    """
    override_active: bool = False
    last_checked_at: Optional[datetime] = None
    in_flight: Optional[ProbeHandle] = field(default=None, repr=False)


# Process-wide poll state, created on first use and kept until exit.
_poll_state: Optional[OmegaPollState] = None


def get_poll_state() -> OmegaPollState:
    """
    Get or create the process-wide poll state singleton.

    Returns:
        OmegaPollState instance
    """
    global _poll_state
    if _poll_state is None:
        _poll_state = OmegaPollState()
    return _poll_state


def parse_payload(body: bytes) -> bool:
    """
    Interpret the check endpoint's answer.

    Raises:
        ProbeError: If the body is not exactly '0' or '1'
    """
    payload = body.strip()
    if payload == b'1':
        return True
    if payload == b'0':
        return False
    raise ProbeError(f"Invalid Omega Shift payload {body[:MAX_BODY]!r}")


class HttpByteFetcher:
    """
    Fetches the check endpoint's one-character answer with requests.
    """

    def __init__(self, session_factory: Callable[[], requests.Session] = requests.Session):
        self._session_factory = session_factory

    def __call__(self, url: str, timeout: float, handle: ProbeHandle) -> bytes:
        """
        Fetch the first few bytes of url.

        Args:
            url: Endpoint to query
            timeout: Connect/read timeout in seconds
            handle: Probe handle; the session and response are attached to it
                so cancellation closes them

        Returns:
            Raw body bytes (at most MAX_BODY)

        Raises:
            requests.exceptions.RequestException: On network or HTTP failure
        """
        session = self._session_factory()
        handle.attach(session)
        try:
            response = session.get(url, timeout=timeout, stream=True)
            handle.attach(response)
            with response:
                if response.status_code != requests.codes.ok:
                    raise requests.exceptions.HTTPError(
                        f"Omega check returned HTTP {response.status_code}",
                        response=response
                    )
                return next(response.iter_content(chunk_size=MAX_BODY), b'')
        finally:
            session.close()


class OmegaPoller:
    """
    Periodically asks whether it's Omega Shift.

    All state changes happen on the dispatch thread. The probe itself runs on
    a worker thread and posts a ProbeResult back through the dispatcher.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        clock,
        preferences,
        state: Optional[OmegaPollState] = None,
        fetcher: Optional[Callable[[str, float, ProbeHandle], bytes]] = None,
        check_url: str = OMEGA_CHECK_URL,
        min_interval: timedelta = MIN_INTERVAL,
        probe_timeout: float = PROBE_TIMEOUT,
        active_month: int = ACTIVE_MONTH,
        logger: Optional[LoggingService] = None
    ):
        """
        Initialize the poller.

        Args:
            dispatcher: Dispatcher owning all poll state
            clock: ShiftClock used for the current time and month
            preferences: Preferences with the omega_enabled flag
            state: Shared poll state (default: process-wide singleton)
            fetcher: Callable(url, timeout, handle) -> bytes
            check_url: Endpoint answering '0' or '1'
            min_interval: Minimum time between checks
            probe_timeout: Seconds before an in-flight probe is aborted
            active_month: Calendar month (1-12) in which checks run
            logger: Logging service
        """
        self._dispatcher = dispatcher
        self._clock = clock
        self._preferences = preferences
        self._state = state if state is not None else get_poll_state()
        self._fetcher = fetcher or HttpByteFetcher()
        self._check_url = check_url
        self._min_interval = min_interval
        self._probe_timeout = probe_timeout
        self._active_month = active_month
        self._logger = logger or get_logger()

        self._timer_token: Any = None
        self._timeout_timer: Optional[threading.Timer] = None
        self._listeners: List[Callable[[bool], None]] = []

    @classmethod
    def from_config(cls, dispatcher: Dispatcher, clock, preferences, config, **kwargs) -> 'OmegaPoller':
        """Build a poller from the omega.* config section"""
        return cls(
            dispatcher,
            clock,
            preferences,
            check_url=config.get('omega.check_url', OMEGA_CHECK_URL),
            min_interval=timedelta(minutes=config.get('omega.interval_minutes', 10)),
            probe_timeout=float(config.get('omega.timeout_seconds', PROBE_TIMEOUT)),
            active_month=int(config.get('omega.active_month', ACTIVE_MONTH)),
            **kwargs
        )

    @property
    def override_active(self) -> bool:
        return self._state.override_active

    @property
    def state(self) -> OmegaPollState:
        return self._state

    def add_listener(self, callback: Callable[[bool], None]) -> None:
        """Register a callback invoked with the new value whenever the override flips"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[bool], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def maybe_check(self, now: Optional[datetime] = None) -> None:
        """
        Check now if the last check is old enough, otherwise schedule the
        check for when it will be.
        """
        if now is None:
            now = self._clock.now()

        last = self._state.last_checked_at
        if last is not None:
            elapsed = now - last
            if elapsed < self._min_interval:
                wait = self._min_interval - elapsed
                self._logger.debug(
                    f"Last Omega check was {elapsed.total_seconds():.0f}s ago, "
                    f"rescheduling in {wait.total_seconds():.0f}s"
                )
                self._schedule(wait)
                return

        self._state.last_checked_at = now

        if self._eligible(now):
            if self._state.in_flight is None:
                self._launch_probe()
            else:
                self._logger.debug(f"Probe {self._state.in_flight.id} still in flight, not starting another")
        else:
            self._logger.debug("Not checking Omega Shift right now")
            if self._state.override_active:
                self._set_override(False)

        self._schedule(self._min_interval)

    def cancel_pending(self) -> None:
        """
        Cancel the pending check only.

        A probe already in flight keeps running and its answer is applied
        when it arrives.
        """
        if self._timer_token is not None:
            self._dispatcher.cancel(self._timer_token)
            self._timer_token = None

    def cancel_all(self) -> None:
        """Abort the in-flight probe and cancel the pending check"""
        self.cancel_pending()

        if self._timeout_timer is not None:
            self._timeout_timer.cancel()
            self._timeout_timer = None

        handle = self._state.in_flight
        if handle is not None:
            self._state.in_flight = None
            if handle.cancel():
                self._logger.debug(f"Probe {handle.id} cancelled")

    def _eligible(self, now: datetime) -> bool:
        return (self._preferences.omega_enabled
                and self._clock.current_month(now) == self._active_month)

    def _schedule(self, delay: timedelta) -> None:
        if self._timer_token is not None:
            self._dispatcher.cancel(self._timer_token)
        self._timer_token = self._dispatcher.post(self._on_timer, max(0.0, delay.total_seconds()))

    def _on_timer(self) -> None:
        self._timer_token = None
        self.maybe_check()

    def _launch_probe(self) -> None:
        handle = ProbeHandle()
        self._state.in_flight = handle
        self._logger.debug(f"Starting Omega Shift probe {handle.id}")

        timer = threading.Timer(self._probe_timeout, self._on_probe_timeout, args=(handle,))
        timer.daemon = True
        self._timeout_timer = timer

        worker = threading.Thread(target=self._run_probe, args=(handle, timer),
                                  name=f"omega-probe-{handle.id}", daemon=True)
        timer.start()
        worker.start()

    def _on_probe_timeout(self, handle: ProbeHandle) -> None:
        # Timer thread: only the handle is touched here.
        if handle.cancel():
            self._logger.warning(f"Omega Shift check timed out after {self._probe_timeout:.0f}s, aborted")
            self._dispatcher.post_threadsafe(self._on_probe_result, ProbeResult.cancelled(handle))

    def _run_probe(self, handle: ProbeHandle, timer: threading.Timer) -> None:
        # Worker thread: never touches poll state directly.
        try:
            body = self._fetcher(self._check_url, self._probe_timeout, handle)
            result = ProbeResult.succeeded(handle, parse_payload(body))
        except ProbeError as e:
            result = ProbeResult.failed(handle, str(e))
        except requests.exceptions.RequestException as e:
            result = ProbeResult.failed(handle, f"request failed: {e}")
        except OSError as e:
            result = ProbeResult.failed(handle, f"I/O error: {e}")
        except Exception as e:
            self._logger.error(f"Unexpected error during Omega Shift check: {e}", exc_info=True)
            result = ProbeResult.failed(handle, f"unexpected error: {e}")
        finally:
            timer.cancel()

        if not handle.finish():
            result = ProbeResult.cancelled(handle)

        self._dispatcher.post_threadsafe(self._on_probe_result, result)

    def _on_probe_result(self, result: ProbeResult) -> None:
        handle = result.handle
        if self._state.in_flight is not handle:
            self._logger.debug(f"Dropping result of stale probe {handle.id}")
            return

        self._state.in_flight = None
        self._timeout_timer = None

        if result.outcome is ProbeOutcome.CANCELLED or handle.cancelled:
            self._logger.debug(f"Probe {handle.id} was cancelled, ignoring")
            return

        if result.outcome is ProbeOutcome.FAILED:
            self._logger.warning(f"Omega Shift check failed, ignoring: {result.reason}")
            return

        self._logger.debug(f"Omega Shift check says {'yes' if result.override_value else 'no'}")
        if result.override_value != self._state.override_active:
            self._set_override(result.override_value)

    def _set_override(self, value: bool) -> None:
        self._state.override_active = value
        self._logger.info(f"Omega Shift {'called' if value else 'over'}")
        for listener in list(self._listeners):
            listener(value)
