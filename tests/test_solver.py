import time
from pathlib import Path

import pytest

from image_compressor.core.errors import ConfigError, EncodeError, EncodeTimeoutError
from image_compressor.models.compress import EncodeAttempt
from image_compressor.services.solver import SizeConstraintSolver


class RecordingAttempt:
    def __init__(self, size_for_quality, fail_on_quality=None):
        self.size_for_quality = size_for_quality
        self.fail_on_quality = fail_on_quality
        self.qualities = []

    def __call__(self, quality: int) -> EncodeAttempt:
        self.qualities.append(quality)
        if quality == self.fail_on_quality:
            raise EncodeError("codec failure")
        return EncodeAttempt(quality, Path("out.jpg"), self.size_for_quality(quality))


def test_without_target_runs_exactly_once_at_requested_quality():
    attempt = RecordingAttempt(lambda q: 10_000)
    outcome = SizeConstraintSolver().solve(attempt, 80)

    assert attempt.qualities == [80]
    assert outcome.target_met is True
    assert outcome.final.quality_used == 80


def test_target_met_on_first_attempt_keeps_requested_quality():
    attempt = RecordingAttempt(lambda q: q * 100)
    outcome = SizeConstraintSolver().solve(attempt, 80, target_size_bytes=8000)

    assert attempt.qualities == [80]
    assert outcome.target_met is True


def test_quality_steps_down_until_target_fits():
    attempt = RecordingAttempt(lambda q: q * 100)
    outcome = SizeConstraintSolver().solve(attempt, 80, target_size_bytes=5000)

    assert outcome.quality_trail == (80, 70, 60, 50)
    assert outcome.target_met is True
    assert outcome.final.byte_size == 5000


def test_unreachable_target_stops_at_quality_floor():
    attempt = RecordingAttempt(lambda q: 1_000_000)
    outcome = SizeConstraintSolver().solve(attempt, 80, target_size_bytes=1)

    assert outcome.quality_trail == (80, 70, 60, 50, 40, 30, 20, 10)
    assert outcome.target_met is False
    assert outcome.final.quality_used == 10


def test_floor_is_not_re_encoded():
    attempt = RecordingAttempt(lambda q: 1_000_000)
    outcome = SizeConstraintSolver().solve(attempt, 15, target_size_bytes=1)

    assert outcome.quality_trail == (15, 10)
    assert outcome.target_met is False


def test_attempt_limit_caps_the_search():
    attempt = RecordingAttempt(lambda q: 1_000_000)
    solver = SizeConstraintSolver(max_attempts=10, floor=1, step=1)
    outcome = solver.solve(attempt, 100, target_size_bytes=1)

    assert len(outcome.attempts) == 10
    assert outcome.quality_trail == tuple(range(100, 90, -1))
    assert outcome.target_met is False


def test_quality_below_floor_is_clamped():
    attempt = RecordingAttempt(lambda q: 10)
    outcome = SizeConstraintSolver().solve(attempt, 3)

    assert attempt.qualities == [10]
    assert outcome.final.quality_used == 10


def test_quality_sequence_is_non_increasing_and_never_repeats():
    attempt = RecordingAttempt(lambda q: 1_000_000)
    outcome = SizeConstraintSolver().solve(attempt, 100, target_size_bytes=1)
    trail = outcome.quality_trail

    assert all(a > b for a, b in zip(trail, trail[1:]))
    assert min(trail) == 10
    assert len(trail) <= 10


@pytest.mark.parametrize("target", [0, -1])
def test_non_positive_target_is_rejected_before_encoding(target):
    attempt = RecordingAttempt(lambda q: 1)
    with pytest.raises(ConfigError):
        SizeConstraintSolver().solve(attempt, 80, target_size_bytes=target)
    assert attempt.qualities == []


def test_encode_error_aborts_without_retry():
    attempt = RecordingAttempt(lambda q: 1_000_000, fail_on_quality=70)
    with pytest.raises(EncodeError):
        SizeConstraintSolver().solve(attempt, 80, target_size_bytes=1)
    assert attempt.qualities == [80, 70]


def test_passed_deadline_abandons_after_current_attempt():
    attempt = RecordingAttempt(lambda q: 1_000_000)
    with pytest.raises(EncodeTimeoutError):
        SizeConstraintSolver().solve(attempt, 80, target_size_bytes=1, deadline=time.monotonic() - 1)
    assert attempt.qualities == [80]


def test_invalid_solver_configuration():
    with pytest.raises(ConfigError):
        SizeConstraintSolver(max_attempts=0)
