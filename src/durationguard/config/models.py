"""
Pydantic model for the slow-test feature parameters.

The CI host stores feature parameters as strings keyed by
``testNamesPatterns``, ``minDuration`` and ``threshold``. This module keeps
that raw surface intact: values are only checked for presence here, because
turning them into a decision policy (and degrading safely when they are
malformed) is the job of :mod:`durationguard.config.settings`.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TEST_NAMES_PATTERNS_PARAM = "testNamesPatterns"
MIN_DURATION_PARAM = "minDuration"
THRESHOLD_PARAM = "threshold"

DEFAULT_TEST_NAMES_PATTERN = ".*"
DEFAULT_MIN_DURATION_MS = "1000"
DEFAULT_THRESHOLD_PERCENT = "80"


class FeatureParameters(BaseModel):
    """
    Raw feature parameters as the CI host stores them.

    Numbers given in YAML or Python are coerced to strings so the settings
    resolver always sees the same representation the host would hand over.

    Attributes:
        test_names_patterns: Regular expression a test name must fully match
        min_duration: Minimum current duration (ms) for a test to be judged
        threshold: Slowdown percentage above which a test counts as slow
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    test_names_patterns: Optional[str] = Field(
        default=DEFAULT_TEST_NAMES_PATTERN,
        alias=TEST_NAMES_PATTERNS_PARAM,
        description="Regular expression selecting the tests to watch",
        json_schema_extra={"example": r"com\.acme\..*"},
    )

    min_duration: Optional[str] = Field(
        default=DEFAULT_MIN_DURATION_MS,
        alias=MIN_DURATION_PARAM,
        description="Tests running for less than this many milliseconds are never reported",
        json_schema_extra={"example": "1000"},
    )

    threshold: Optional[str] = Field(
        default=DEFAULT_THRESHOLD_PERCENT,
        alias=THRESHOLD_PARAM,
        description="Slowdown percentage that counts as a regression",
        json_schema_extra={"example": "80"},
    )

    @field_validator('test_names_patterns', 'min_duration', 'threshold', mode='before')
    @classmethod
    def coerce_to_string(cls, v: Any) -> Optional[str]:
        """Store scalars the way the host does: as text."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"expected a string or a number, got {type(v).__name__}")
        return str(v)

    def as_raw_parameters(self) -> Dict[str, str]:
        """Return the host-style mapping, omitting unset values."""
        raw = self.model_dump(by_alias=True)
        return {key: value for key, value in raw.items() if value is not None}


@dataclass(frozen=True)
class InvalidProperty:
    """A parameter that failed the presence check."""

    name: str
    reason: str


def default_parameters() -> Dict[str, str]:
    """Parameters a newly added feature starts with."""
    return {
        TEST_NAMES_PATTERNS_PARAM: DEFAULT_TEST_NAMES_PATTERN,
        MIN_DURATION_PARAM: DEFAULT_MIN_DURATION_MS,
        THRESHOLD_PARAM: DEFAULT_THRESHOLD_PERCENT,
    }


def validate_parameters(properties: Mapping[str, Optional[str]]) -> List[InvalidProperty]:
    """
    Check that every parameter is present and non-empty.

    Only presence is checked; see the module docstring.
    """
    invalid: List[InvalidProperty] = []
    if not properties.get(TEST_NAMES_PATTERNS_PARAM):
        invalid.append(InvalidProperty(TEST_NAMES_PATTERNS_PARAM, "Test names patterns are not specified"))
    if not properties.get(MIN_DURATION_PARAM):
        invalid.append(InvalidProperty(MIN_DURATION_PARAM, "Minimum duration is not specified"))
    if not properties.get(THRESHOLD_PARAM):
        invalid.append(InvalidProperty(THRESHOLD_PARAM, "Threshold is not specified"))
    return invalid


def describe_parameters(properties: Mapping[str, Optional[str]]) -> str:
    """Render the parameters as the short HTML summary shown next to the feature."""
    return (
        f"Test names patterns: {properties.get(TEST_NAMES_PATTERNS_PARAM)}<br>"
        f"Threshold: {properties.get(THRESHOLD_PARAM)}%<br>"
        f"Minimum duration: {properties.get(MIN_DURATION_PARAM)} ms"
    )


__all__ = [
    "TEST_NAMES_PATTERNS_PARAM",
    "MIN_DURATION_PARAM",
    "THRESHOLD_PARAM",
    "FeatureParameters",
    "InvalidProperty",
    "default_parameters",
    "validate_parameters",
    "describe_parameters",
]
