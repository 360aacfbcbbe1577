"""
Verification runner for the sRGB composition formula.

Two batches are run against a compositor:

- Batch A checks the literal reference vectors one by one.
- Batch B sweeps four properties over the input domain:
    P1  alpha = 0    => result == background
    P2  alpha = 255  => result == foreground
    P3  result always in [0, 255]
    P4  result non-decreasing in background for 0 < alpha < 255

Nothing here prints. Progress goes through an optional callback taking
(event, message), the same way the converter reports progress stages, so
the CLI decides how things look. The compositor itself is injectable so a
known-bad formula can be checked to make sure the harness catches it.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from .compositor import compose, compose_array
from .config import VerifierConfig
from .constants import (
    SAMPLE_MIN,
    SAMPLE_MAX,
    ALPHA_TRANSPARENT,
    ALPHA_OPAQUE,
    EXHAUSTIVE_FAILURE_RECORDS,
)
from .vectors import REFERENCE_VECTORS, ReferenceVector

logger = logging.getLogger(__name__)

ComposeFn = Callable[[int, int, int], int]
ArrayComposeFn = Callable[..., np.ndarray]
ReportCallback = Optional[Callable[[str, str], None]]

# Callback event names
EVENT_SECTION = "section"
EVENT_PASS = "pass"
EVENT_FAIL = "fail"
EVENT_DETAIL = "detail"
EVENT_SUMMARY = "summary"

# Check names used in Failure.check
CHECK_VECTORS = "vectors"
CHECK_TRANSPARENCY = "P1"
CHECK_OPACITY = "P2"
CHECK_RANGE = "P3"
CHECK_MONOTONIC = "P4"
CHECK_AGREEMENT = "agreement"

# Failure notes for checks whose violation is the same every time
NOTE_TRANSPARENCY = "alpha=0 must return background"
NOTE_OPACITY = "alpha=255 must return foreground"
NOTE_RANGE = "result outside [0, 255]"
NOTE_AGREEMENT = "vectorized result differs from compose()"


@dataclass(frozen=True)
class Failure:
    """
    One detected defect, with enough context to reproduce it.

    Attributes:
        check: Which check found it ("vectors", "P1".."P4", "agreement")
        foreground: Foreground input
        alpha: Alpha input
        background: Background input
        actual: Value the compositor returned
        expected: Required value, or None for properties without one (P3, P4)
        description: Vector description or property-specific note
    """

    check: str
    foreground: int
    alpha: int
    background: int
    actual: int
    expected: Optional[int] = None
    description: str = ""

    @property
    def inputs(self) -> Tuple[int, int, int]:
        return (self.foreground, self.alpha, self.background)

    def __str__(self) -> str:
        text = f"compose({self.foreground}, {self.alpha}, {self.background}) = {self.actual}"
        if self.expected is not None:
            text += f", expected {self.expected}"
        return text


@dataclass
class VerificationResult:
    """
    Outcome of one or more checks.

    `failures` holds the recorded Failure entries. Exhaustive sweeps stop
    recording after EXHAUSTIVE_FAILURE_RECORDS per property and only count
    the rest in `unrecorded_failures`; failure_count includes both.
    """

    failures: List[Failure] = field(default_factory=list)
    checks_run: int = 0
    unrecorded_failures: int = 0

    @property
    def failure_count(self) -> int:
        return len(self.failures) + self.unrecorded_failures

    @property
    def passed(self) -> bool:
        return self.failure_count == 0

    def add(self, failure: Failure) -> None:
        self.failures.append(failure)

    def extend(self, other: "VerificationResult") -> None:
        """Fold another result into this one."""
        self.failures.extend(other.failures)
        self.checks_run += other.checks_run
        self.unrecorded_failures += other.unrecorded_failures

    def failures_for(self, check: str) -> List[Failure]:
        return [f for f in self.failures if f.check == check]


def _emit(callback: ReportCallback, event: str, message: str) -> None:
    if callback is not None:
        callback(event, message)


class _ViolationReporter:
    """Reports violations for one property, honouring the line cap."""

    def __init__(self, callback: ReportCallback, limit: Optional[int]):
        self.callback = callback
        self.limit = limit
        self.count = 0

    def violation(self, message: str) -> None:
        self.count += 1
        if self.limit is None or self.count <= self.limit:
            _emit(self.callback, EVENT_FAIL, f"  FAIL: {message}")

    def wants_line(self) -> bool:
        """True if the next violation would actually be emitted."""
        if self.callback is None:
            return False
        return self.limit is None or self.count < self.limit

    def skip(self, count: int) -> None:
        """Count violations that will not be shown."""
        self.count += count

    def finish(self) -> None:
        if self.count == 0:
            _emit(self.callback, EVENT_PASS, "  PASS")
        elif self.limit is not None and self.count > self.limit:
            hidden = self.count - self.limit
            _emit(self.callback, EVENT_DETAIL, f"  ... {hidden} more violation(s) not shown")


def _monotonic_note(previous: int) -> str:
    return f"previous background gave {previous}"


def _sample_range(stride: int, start: int = SAMPLE_MIN, stop: int = SAMPLE_MAX + 1) -> range:
    return range(start, stop, stride)


# =============================================================================
# Batch A: literal vectors
# =============================================================================

def run_vectors(
    vectors: Iterable[ReferenceVector] = REFERENCE_VECTORS,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None,
    show_passes: bool = True
) -> VerificationResult:
    """
    Check each reference vector against the compositor.

    Emits `PASS [i]: <description>` or `FAIL [i]: <description>` per vector
    (1-based), with an actual-vs-expected detail line after each FAIL.

    Returns:
        VerificationResult with one Failure per mismatching vector
    """
    vectors = list(vectors)
    result = VerificationResult()

    _emit(callback, EVENT_SECTION, f"Running {len(vectors)} sRGB composition tests...")

    for i, vector in enumerate(vectors, start=1):
        actual = compose_fn(*vector.inputs)
        result.checks_run += 1

        if actual != vector.expected:
            failure = Failure(
                check=CHECK_VECTORS,
                foreground=vector.foreground,
                alpha=vector.alpha,
                background=vector.background,
                actual=actual,
                expected=vector.expected,
                description=vector.description
            )
            result.add(failure)
            _emit(callback, EVENT_FAIL, f"FAIL [{i}]: {vector.description}")
            _emit(callback, EVENT_DETAIL, f"  {failure}")
        elif show_passes:
            _emit(callback, EVENT_PASS, f"PASS [{i}]: {vector.description}")

    if result.passed:
        _emit(callback, EVENT_SUMMARY, f"All {len(vectors)} tests passed.")
    else:
        _emit(callback, EVENT_SUMMARY, f"{result.failure_count} of {len(vectors)} tests FAILED.")

    logger.info(f"Reference vectors: {len(vectors)} checked, {result.failure_count} failed")
    return result


# =============================================================================
# Batch B: sampled property sweeps
# =============================================================================

def check_transparency_identity(
    config: VerifierConfig,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """P1: compose(f, 0, b) == b."""
    result = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)

    for bg in _sample_range(config.transparency_stride):
        for fg in _sample_range(config.transparency_stride):
            actual = compose_fn(fg, ALPHA_TRANSPARENT, bg)
            result.checks_run += 1
            if actual != bg:
                failure = Failure(CHECK_TRANSPARENCY, fg, ALPHA_TRANSPARENT, bg, actual, bg,
                                  NOTE_TRANSPARENCY)
                result.add(failure)
                reporter.violation(str(failure))

    reporter.finish()
    return result


def check_opacity_identity(
    config: VerifierConfig,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """P2: compose(f, 255, b) == f."""
    result = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)

    for fg in _sample_range(config.opacity_stride):
        for bg in _sample_range(config.opacity_stride):
            actual = compose_fn(fg, ALPHA_OPAQUE, bg)
            result.checks_run += 1
            if actual != fg:
                failure = Failure(CHECK_OPACITY, fg, ALPHA_OPAQUE, bg, actual, fg, NOTE_OPACITY)
                result.add(failure)
                reporter.violation(str(failure))

    reporter.finish()
    return result


def check_range_closure(
    config: VerifierConfig,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """P3: 0 <= compose(f, a, b) <= 255 (background sampled)."""
    result = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)
    backgrounds = _sample_range(config.range_background_stride)

    for fg in range(SAMPLE_MIN, SAMPLE_MAX + 1):
        for alpha in range(SAMPLE_MIN, SAMPLE_MAX + 1):
            for bg in backgrounds:
                actual = compose_fn(fg, alpha, bg)
                result.checks_run += 1
                if not SAMPLE_MIN <= actual <= SAMPLE_MAX:
                    failure = Failure(CHECK_RANGE, fg, alpha, bg, actual,
                                      description=NOTE_RANGE)
                    result.add(failure)
                    reporter.violation(f"{failure} outside [{SAMPLE_MIN}, {SAMPLE_MAX}]")

    reporter.finish()
    return result


def check_background_monotonic(
    config: VerifierConfig,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """P4: for 0 < a < 255, compose(f, a, b) never decreases as b grows."""
    result = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)

    for fg in _sample_range(config.monotonic_stride):
        for alpha in _sample_range(config.monotonic_stride, start=1, stop=ALPHA_OPAQUE):
            previous = compose_fn(fg, alpha, SAMPLE_MIN)
            result.checks_run += 1
            for bg in range(SAMPLE_MIN + 1, SAMPLE_MAX + 1):
                actual = compose_fn(fg, alpha, bg)
                result.checks_run += 1
                if actual < previous:
                    failure = Failure(CHECK_MONOTONIC, fg, alpha, bg, actual,
                                      description=_monotonic_note(previous))
                    result.add(failure)
                    reporter.violation(
                        f"non-monotonic at fg={fg}, alpha={alpha}, bg={bg} "
                        f"({actual} < {previous})"
                    )
                previous = actual

    reporter.finish()
    return result


PROPERTIES: Tuple[Tuple[str, str, Callable[..., VerificationResult]], ...] = (
    (CHECK_TRANSPARENCY, "alpha=0 => result = background", check_transparency_identity),
    (CHECK_OPACITY, "alpha=255 => result = foreground", check_opacity_identity),
    (CHECK_RANGE, "result always in [0, 255]", check_range_closure),
    (CHECK_MONOTONIC, "monotonic in background", check_background_monotonic),
)


def verify_properties(
    config: Optional[VerifierConfig] = None,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """
    Run the four property sweeps on the sampled grids from `config`.

    Each property gets a header line, one line per violation and a
    trailing PASS line only if it found nothing.
    """
    config = config or VerifierConfig()
    result = VerificationResult()

    _emit(callback, EVENT_SECTION, "Verifying formula properties...")

    for number, (name, title, check) in enumerate(PROPERTIES, start=1):
        _emit(callback, EVENT_SECTION, f"Property {number}: {title}")
        started = time.perf_counter()
        outcome = check(config, compose_fn, callback)
        logger.debug(
            f"{name}: {outcome.checks_run} calls, {outcome.failure_count} violations "
            f"in {time.perf_counter() - started:.2f}s"
        )
        result.extend(outcome)

    if result.passed:
        _emit(callback, EVENT_SUMMARY, "All formula properties verified.")
    else:
        _emit(callback, EVENT_SUMMARY, f"{result.failure_count} property violations found.")

    logger.info(f"Property sweeps: {result.checks_run} calls, {result.failure_count} violations")
    return result


# =============================================================================
# Exhaustive sweeps (vectorized)
# =============================================================================

# One alpha plane: rows are foreground, columns are background
_FOREGROUND_AXIS = np.arange(SAMPLE_MIN, SAMPLE_MAX + 1, dtype=np.int32).reshape(-1, 1)
_BACKGROUND_AXIS = np.arange(SAMPLE_MIN, SAMPLE_MAX + 1, dtype=np.int32).reshape(1, -1)


def _record_plane(
    result: VerificationResult,
    reporter: _ViolationReporter,
    check: str,
    alpha: int,
    mask: np.ndarray,
    actual: np.ndarray,
    expected: Optional[np.ndarray] = None,
    bg_offset: int = 0,
    note: str = "",
    previous: Optional[np.ndarray] = None
) -> None:
    """
    Record every True cell of a (foreground, background) mask.

    Each failure carries `note`, or for P4 the value at the previous
    background taken from `previous`.

    Failure objects are only built while they will be kept or printed;
    past that point the remaining cells are counted in one step.
    """
    positions = np.argwhere(mask)
    recorded = len(result.failures)
    for index, (fg, col) in enumerate(positions):
        if recorded >= EXHAUSTIVE_FAILURE_RECORDS and not reporter.wants_line():
            remaining = len(positions) - index
            result.unrecorded_failures += remaining
            reporter.skip(remaining)
            return
        bg = int(col) + bg_offset
        value = int(actual[fg, col])
        want = None if expected is None else int(expected[fg, col])
        description = note if previous is None else _monotonic_note(int(previous[fg, col]))
        failure = Failure(check, int(fg), alpha, bg, value, want, description)
        if recorded < EXHAUSTIVE_FAILURE_RECORDS:
            result.add(failure)
            recorded += 1
        else:
            result.unrecorded_failures += 1
        reporter.violation(str(failure))


def sweep_exhaustive(
    config: Optional[VerifierConfig] = None,
    array_fn: ArrayComposeFn = compose_array,
    compose_fn: ComposeFn = compose,
    callback: ReportCallback = None
) -> VerificationResult:
    """
    Sweep P1-P4 over all 256^3 inputs with the vectorized compositor.

    Works one 256x256 alpha plane at a time. Finishes with an agreement
    check: the vectorized and scalar compositors must return the same value
    on the P3 sampling grid, otherwise the exhaustive results say nothing
    about compose() itself.
    """
    config = config or VerifierConfig()
    result = VerificationResult()
    fg_plane = np.broadcast_to(_FOREGROUND_AXIS, (SAMPLE_MAX + 1, SAMPLE_MAX + 1))
    bg_plane = np.broadcast_to(_BACKGROUND_AXIS, (SAMPLE_MAX + 1, SAMPLE_MAX + 1))

    _emit(callback, EVENT_SECTION, "Exhaustive sweep over all 16,777,216 inputs...")
    started = time.perf_counter()

    def plane(alpha: int) -> np.ndarray:
        return np.asarray(array_fn(_FOREGROUND_AXIS, alpha, _BACKGROUND_AXIS, dtype=np.int32))

    # P1 and P2 each need a single plane
    for check, alpha, expected, title, note in (
        (CHECK_TRANSPARENCY, ALPHA_TRANSPARENT, bg_plane, "alpha=0 => result = background",
         NOTE_TRANSPARENCY),
        (CHECK_OPACITY, ALPHA_OPAQUE, fg_plane, "alpha=255 => result = foreground", NOTE_OPACITY),
    ):
        _emit(callback, EVENT_SECTION, f"Exhaustive {check}: {title}")
        sub = VerificationResult()
        reporter = _ViolationReporter(callback, config.max_violation_lines)
        out = plane(alpha)
        sub.checks_run += out.size
        _record_plane(sub, reporter, check, alpha, out != expected, out, expected, note=note)
        reporter.finish()
        result.extend(sub)

    _emit(callback, EVENT_SECTION, f"Exhaustive {CHECK_RANGE}: result always in [0, 255]")
    sub = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)
    for alpha in range(SAMPLE_MIN, SAMPLE_MAX + 1):
        out = plane(alpha)
        sub.checks_run += out.size
        mask = (out < SAMPLE_MIN) | (out > SAMPLE_MAX)
        if mask.any():
            _record_plane(sub, reporter, CHECK_RANGE, alpha, mask, out, note=NOTE_RANGE)
    reporter.finish()
    result.extend(sub)

    _emit(callback, EVENT_SECTION, f"Exhaustive {CHECK_MONOTONIC}: monotonic in background")
    sub = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)
    for alpha in range(ALPHA_TRANSPARENT + 1, ALPHA_OPAQUE):
        out = plane(alpha)
        sub.checks_run += out.size
        # Column j of the diff compares background j+1 against background j
        mask = np.diff(out, axis=1) < 0
        if mask.any():
            _record_plane(sub, reporter, CHECK_MONOTONIC, alpha, mask, out[:, 1:], bg_offset=1,
                          previous=out[:, :-1])
    reporter.finish()
    result.extend(sub)

    _emit(callback, EVENT_SECTION, "Vectorized compositor agrees with compose()")
    sub = VerificationResult()
    reporter = _ViolationReporter(callback, config.max_violation_lines)
    backgrounds = np.arange(SAMPLE_MIN, SAMPLE_MAX + 1, config.range_background_stride, dtype=np.int32)
    bg_values = backgrounds.tolist()
    for alpha in range(SAMPLE_MIN, SAMPLE_MAX + 1):
        rows = np.asarray(
            array_fn(_FOREGROUND_AXIS, alpha, backgrounds.reshape(1, -1), dtype=np.int32)
        ).tolist()
        for fg in range(SAMPLE_MIN, SAMPLE_MAX + 1):
            for col, bg in enumerate(bg_values):
                scalar = compose_fn(fg, alpha, bg)
                sub.checks_run += 1
                vector_value = rows[fg][col]
                if vector_value != scalar:
                    failure = Failure(CHECK_AGREEMENT, fg, alpha, bg, vector_value, scalar,
                                      description=NOTE_AGREEMENT)
                    if len(sub.failures) < EXHAUSTIVE_FAILURE_RECORDS:
                        sub.add(failure)
                    else:
                        sub.unrecorded_failures += 1
                    reporter.violation(str(failure))
    reporter.finish()
    result.extend(sub)

    if result.passed:
        _emit(callback, EVENT_SUMMARY, "Exhaustive sweep found no violations.")
    else:
        _emit(callback, EVENT_SUMMARY, f"{result.failure_count} exhaustive violations found.")

    logger.info(
        f"Exhaustive sweep: {result.checks_run} evaluations, {result.failure_count} violations "
        f"in {time.perf_counter() - started:.2f}s"
    )
    return result


# =============================================================================
# Full run
# =============================================================================

def run_verification(
    config: Optional[VerifierConfig] = None,
    compose_fn: ComposeFn = compose,
    array_fn: ArrayComposeFn = compose_array,
    callback: ReportCallback = None,
    vectors: Iterable[ReferenceVector] = REFERENCE_VECTORS
) -> VerificationResult:
    """
    Run batch A, batch B and (if configured) the exhaustive sweep.

    Returns:
        Combined VerificationResult; failure_count == 0 means success
    """
    config = config or VerifierConfig()
    result = VerificationResult()

    result.extend(run_vectors(vectors, compose_fn, callback, show_passes=config.show_passes))
    _emit(callback, EVENT_SECTION, "")
    result.extend(verify_properties(config, compose_fn, callback))

    if config.exhaustive:
        _emit(callback, EVENT_SECTION, "")
        result.extend(sweep_exhaustive(config, array_fn, compose_fn, callback))

    logger.info(f"Verification finished: {result.failure_count} failure(s)")
    return result
