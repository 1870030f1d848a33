"""
Crossfade State Tests
=====================

Settling, fading, re-anchoring and corruption recovery.
"""
from datetime import timedelta

import pytest

from shiftbanner.core.crossfade import (
    FADE_DURATION, NO_FADE, CrossfadeState, Layer, ShiftCorruptionError
)
from shiftbanner.core.shift_clock import Shift
from tests.fakes import la_time


T0 = la_time(2024, 3, 5, 12, 0, 0)


def settled_in(shift, now=T0):
    state = CrossfadeState()
    state.advance(shift, now)
    return state


class TestInitialRender:

    def test_first_advance_draws_directly(self):
        state = CrossfadeState()
        plan = state.advance(Shift.ALPHAFLIGHT, T0)

        assert plan.layers == (Layer(Shift.ALPHAFLIGHT, 1.0),)
        assert plan.settled_now
        assert not plan.fading
        assert state.last_drawn is Shift.ALPHAFLIGHT
        assert state.target is Shift.ALPHAFLIGHT
        assert state.fade_ends_at == NO_FADE

    def test_reset_forgets_history(self):
        state = settled_in(Shift.DAWNGUARD)
        state.reset()
        assert state.last_drawn is Shift.UNSET
        plan = state.advance(Shift.NIGHTWATCH, T0)
        assert plan.layers == (Layer(Shift.NIGHTWATCH, 1.0),)

    def test_cannot_advance_toward_unset(self):
        with pytest.raises(ValueError):
            CrossfadeState().advance(Shift.UNSET, T0)


class TestSettled:

    def test_unchanged_shift_never_fades(self):
        state = settled_in(Shift.DAWNGUARD)
        for seconds in (1, 60, 3600, 7200):
            plan = state.advance(Shift.DAWNGUARD, T0 + timedelta(seconds=seconds))
            assert plan.layers == (Layer(Shift.DAWNGUARD, 1.0),)
            assert not plan.fading
            assert not plan.settled_now
            assert not state.is_fading

    def test_shift_change_starts_fade(self):
        state = settled_in(Shift.DAWNGUARD)
        plan = state.advance(Shift.ALPHAFLIGHT, T0)

        assert plan.fading
        assert plan.layers == (Layer(Shift.DAWNGUARD, 1.0), Layer(Shift.ALPHAFLIGHT, 0.0))
        assert state.fade_ends_at == T0 + FADE_DURATION


class TestFading:

    def test_opacity_ramps_linearly_and_monotonically(self):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)

        samples = [state.target_alpha(T0 + timedelta(milliseconds=ms)) for ms in range(0, 1001, 33)]
        assert samples == sorted(samples)
        assert state.target_alpha(T0) == 0.0
        assert state.target_alpha(T0 + timedelta(milliseconds=500)) == pytest.approx(0.5)
        assert state.target_alpha(T0 + FADE_DURATION) == 1.0

    def test_opacity_is_clamped(self):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)
        assert state.target_alpha(T0 - timedelta(seconds=5)) == 0.0
        assert state.target_alpha(T0 + timedelta(seconds=5)) == 1.0

    def test_mid_fade_draws_both_layers(self):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)
        plan = state.advance(Shift.ALPHAFLIGHT, T0 + timedelta(milliseconds=250))

        assert plan.fading
        bottom, top = plan.layers
        assert bottom == Layer(Shift.DAWNGUARD, 1.0)
        assert top.shift is Shift.ALPHAFLIGHT
        assert top.alpha == pytest.approx(0.25)

    def test_fade_completes(self):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)
        plan = state.advance(Shift.ALPHAFLIGHT, T0 + FADE_DURATION)

        assert plan.settled_now
        assert plan.layers == (Layer(Shift.ALPHAFLIGHT, 1.0),)
        assert state.last_drawn is Shift.ALPHAFLIGHT
        assert state.fade_ends_at == NO_FADE

    def test_elapsed_fade_adopts_current_shift(self):
        state = settled_in(Shift.ZETASHIFT)
        state.advance(Shift.OMEGASHIFT, T0)
        plan = state.advance(Shift.DAWNGUARD, T0 + timedelta(seconds=2))

        assert plan.settled_now
        assert state.last_drawn is Shift.DAWNGUARD

    def test_override_cleared_mid_fade_snaps_back(self):
        state = settled_in(Shift.ZETASHIFT)
        state.advance(Shift.OMEGASHIFT, T0)

        plan = state.advance(Shift.ZETASHIFT, T0 + timedelta(milliseconds=400))

        assert state.target is Shift.ZETASHIFT
        assert not state.is_fading
        assert state.fade_ends_at == NO_FADE
        assert plan.settled_now
        assert plan.layers == (Layer(Shift.ZETASHIFT, 1.0),)


class TestCorruption:

    def test_three_way_mismatch_resets(self):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)

        plan = state.advance(Shift.NIGHTWATCH, T0 + timedelta(milliseconds=100))

        assert plan.layers == (Layer(Shift.NIGHTWATCH, 1.0),)
        assert plan.settled_now
        assert state.last_drawn is Shift.NIGHTWATCH
        assert not state.is_fading

    def test_corruption_is_logged(self, caplog):
        state = settled_in(Shift.DAWNGUARD)
        state.advance(Shift.ALPHAFLIGHT, T0)
        with caplog.at_level('WARNING', logger='shiftbanner'):
            state.advance(Shift.OMEGASHIFT, T0 + timedelta(milliseconds=100))
        assert 'Three-way shift mismatch' in caplog.text

    def test_error_carries_shifts(self):
        error = ShiftCorruptionError(Shift.DAWNGUARD, Shift.ALPHAFLIGHT, Shift.NIGHTWATCH)
        assert error.real_shift is Shift.NIGHTWATCH
        assert 'DAWNGUARD' in str(error)
