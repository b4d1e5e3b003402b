"""
Settings resolution: raw feature parameters to a decision policy.

A policy answers two questions for the detector: is this test worth
watching, and is this pair of durations a slowdown. Resolution never raises.
A malformed name pattern or threshold yields :class:`InertPolicy`, which
watches nothing, so a broken feature configuration cannot fail a build.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Pattern, Protocol, Union

from durationguard import logger
from durationguard.config.models import (
    FeatureParameters,
    MIN_DURATION_PARAM,
    TEST_NAMES_PATTERNS_PARAM,
    THRESHOLD_PARAM,
)

# Used when minDuration cannot be parsed; deliberately differs from the
# 1000 ms default offered for new features.
FALLBACK_MIN_DURATION_MS = 300


class DecisionPolicy(Protocol):
    """Decides which tests are watched and which slowdowns are regressions."""

    def is_interesting(self, test_name: str) -> bool:
        ...

    def is_slow(self, reference_duration: int, duration: int) -> bool:
        ...


def slowdown_percent(reference_duration: int, duration: int) -> Optional[int]:
    """
    Growth of ``duration`` over ``reference_duration`` in whole percent.

    The value is truncated toward zero. Returns ``None`` when the reference
    duration is zero or negative, since no percentage exists then.
    """
    if reference_duration <= 0:
        return None
    return int((duration - reference_duration) * 100.0 / reference_duration)


@dataclass(frozen=True)
class ThresholdPolicy:
    """Pattern + minimum duration + percentage threshold."""

    test_name_pattern: Pattern[str]
    threshold_percent: float
    min_duration_ms: int

    def is_interesting(self, test_name: str) -> bool:
        return self.test_name_pattern.fullmatch(test_name) is not None

    def is_slow(self, reference_duration: int, duration: int) -> bool:
        if duration < self.min_duration_ms:
            return False
        if reference_duration <= 0:
            return False
        return (duration - reference_duration) * 100.0 / reference_duration > self.threshold_percent


class InertPolicy:
    """Policy used when the configuration cannot be understood."""

    def is_interesting(self, test_name: str) -> bool:
        return False

    def is_slow(self, reference_duration: int, duration: int) -> bool:
        return False

    def __repr__(self) -> str:
        return "InertPolicy()"


def _parse_min_duration(raw_value: Optional[str]) -> int:
    try:
        return int(raw_value)
    except (TypeError, ValueError):
        logger.debug(
            f"Cannot parse {MIN_DURATION_PARAM}={raw_value!r}, using {FALLBACK_MIN_DURATION_MS} ms"
        )
        return FALLBACK_MIN_DURATION_MS


def resolve_policy(
    raw_parameters: Union[Mapping[str, Optional[str]], FeatureParameters]
) -> DecisionPolicy:
    """
    Build the decision policy for one detection run.

    Args:
        raw_parameters: Host-style mapping (``testNamesPatterns``,
            ``minDuration``, ``threshold``) or a :class:`FeatureParameters`

    Returns:
        A :class:`ThresholdPolicy`, or an :class:`InertPolicy` when the
        pattern or the threshold is missing or malformed
    """
    if isinstance(raw_parameters, FeatureParameters):
        raw_parameters = raw_parameters.as_raw_parameters()

    min_duration = _parse_min_duration(raw_parameters.get(MIN_DURATION_PARAM))

    pattern_source = raw_parameters.get(TEST_NAMES_PATTERNS_PARAM)
    threshold_source = raw_parameters.get(THRESHOLD_PARAM)
    try:
        pattern = re.compile(pattern_source)
        threshold = float(threshold_source)
    except (TypeError, ValueError, re.error) as exc:
        logger.warning(
            f"Slow test detection disabled: cannot use {TEST_NAMES_PATTERNS_PARAM}={pattern_source!r}, "
            f"{THRESHOLD_PARAM}={threshold_source!r} ({exc})"
        )
        return InertPolicy()

    logger.debug(
        f"Resolved policy: pattern={pattern.pattern!r}, threshold={threshold}%, min duration={min_duration} ms"
    )
    return ThresholdPolicy(
        test_name_pattern=pattern,
        threshold_percent=threshold,
        min_duration_ms=min_duration,
    )


__all__ = [
    "FALLBACK_MIN_DURATION_MS",
    "DecisionPolicy",
    "ThresholdPolicy",
    "InertPolicy",
    "resolve_policy",
    "slowdown_percent",
]
