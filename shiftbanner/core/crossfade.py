"""
Crossfade State - The two-endpoint dissolve between shift banners
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from .logging_service import LoggingService, get_logger
from .shift_clock import Shift


# How long a fade takes.
FADE_DURATION = timedelta(seconds=1)

# Deadline held while no fade is in progress; always in the past.
NO_FADE = datetime.min.replace(tzinfo=timezone.utc)


class ShiftCorruptionError(Exception):
    """The shift changed twice within a single fade window."""

    def __init__(self, last_drawn: Shift, target: Shift, real_shift: Shift):
        super().__init__(
            f"Three-way shift mismatch: drawn={last_drawn.name}, "
            f"target={target.name}, now={real_shift.name}"
        )
        self.last_drawn = last_drawn
        self.target = target
        self.real_shift = real_shift


@dataclass(frozen=True)
class Layer:
    """One banner to paint, bottom layer first"""
    shift: Shift
    alpha: float


@dataclass(frozen=True)
class RenderPlan:
    """
    What a single wake should paint.

    Attributes:
        layers: Banners to paint in order
        fading: A fade is still in progress after this advance
        settled_now: This advance completed a settle
    """
    layers: Tuple[Layer, ...]
    fading: bool
    settled_now: bool


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class CrossfadeState:
    """
    Tracks the last fully drawn shift, the shift being faded toward and when
    that fade ends.

    Settled(s) is last_drawn == target == s with the NO_FADE deadline.
    Fading(from, to, ends_at) is last_drawn != target.
    """

    def __init__(self, fade_duration: timedelta = FADE_DURATION,
                 logger: Optional[LoggingService] = None):
        self._fade_duration = fade_duration
        self._logger = logger or get_logger()
        self.last_drawn = Shift.UNSET
        self.target = Shift.UNSET
        self.fade_ends_at = NO_FADE

    def reset(self) -> None:
        """Forget all visual history (new or changed surface)"""
        self._settle(Shift.UNSET)

    @property
    def is_fading(self) -> bool:
        return self.last_drawn != self.target

    def target_alpha(self, now: datetime) -> float:
        """Opacity of the target layer, 0 at fade start and 1 at fade end"""
        if not self.is_fading:
            return 1.0
        remaining = self.fade_ends_at - now
        return clamp01((self._fade_duration - remaining) / self._fade_duration)

    def advance(self, real_shift: Shift, now: datetime) -> RenderPlan:
        """
        Step the state machine to now.

        Args:
            real_shift: The shift currently in effect
            now: Current instant

        Returns:
            The layers to paint for this frame
        """
        if not real_shift.is_real:
            raise ValueError("Cannot advance toward UNSET")

        if self.last_drawn is Shift.UNSET:
            # Nothing on screen yet, so there is nothing to fade from.
            self._settle(real_shift)
            return self._settled_plan(real_shift, settled_now=True)

        if not self.is_fading:
            if real_shift == self.last_drawn:
                return self._settled_plan(real_shift, settled_now=False)
            self.target = real_shift
            self.fade_ends_at = now + self._fade_duration
            self._logger.debug(
                f"Starting fade {self.last_drawn.name} -> {self.target.name}, "
                f"ends at {self.fade_ends_at.isoformat()}"
            )
            return self._fading_plan(now)

        if now >= self.fade_ends_at:
            self._settle(real_shift)
            return self._settled_plan(real_shift, settled_now=True)

        try:
            self._check_invariant(real_shift)
        except ShiftCorruptionError as e:
            self._logger.warning(f"{e}; resetting")
            self.reset()
            return self.advance(real_shift, now)

        if real_shift != self.target:
            # Past the corruption check this can only be the shift being
            # faded from, so the fade is abandoned and that shift snaps back.
            self._logger.debug(
                f"Shift reverted mid-fade ({self.target.name} -> {real_shift.name}), "
                "dropping fade"
            )
            self._settle(real_shift)
            return self._settled_plan(real_shift, settled_now=True)

        return self._fading_plan(now)

    def _check_invariant(self, real_shift: Shift) -> None:
        shifts = {self.last_drawn, self.target, real_shift}
        if len(shifts) == 3:
            raise ShiftCorruptionError(self.last_drawn, self.target, real_shift)

    def _settle(self, shift: Shift) -> None:
        self.last_drawn = shift
        self.target = shift
        self.fade_ends_at = NO_FADE

    def _settled_plan(self, shift: Shift, settled_now: bool) -> RenderPlan:
        return RenderPlan(layers=(Layer(shift, 1.0),), fading=False, settled_now=settled_now)

    def _fading_plan(self, now: datetime) -> RenderPlan:
        return RenderPlan(
            layers=(Layer(self.last_drawn, 1.0), Layer(self.target, self.target_alpha(now))),
            fading=True,
            settled_now=False
        )

    def __repr__(self) -> str:
        if self.is_fading:
            return (f"Fading({self.last_drawn.name}, {self.target.name}, "
                    f"{self.fade_ends_at.isoformat()})")
        return f"Settled({self.last_drawn.name})"
