"""Data models shared by the history walker and the regression detector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

PROBLEM_TYPE = "testDurationFailureCondition"

TestIdentity = str


def normalize_test_name(name: str) -> TestIdentity:
    """Return the join key used to match a test across builds."""
    return name.strip()


@dataclass(frozen=True)
class Build:
    """A build of a pipeline. Two builds are equal when their ids are."""

    build_id: int
    pipeline_id: str = field(default="", compare=False)
    finished: bool = field(default=True, compare=False)
    successful: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class TestExecutionRecord:
    """One execution of one test in one build."""

    __test__ = False

    test_name: TestIdentity
    duration_ms: int
    build_id: int
    test_run_id: int
    ignored: bool = False
    muted: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "test_name", normalize_test_name(self.test_name))

    @property
    def participates(self) -> bool:
        return not (self.ignored or self.muted)


class BuildStatisticsSnapshot:
    """
    Passed-test records of a single build, in execution order.

    A test may appear several times (reruns), so lookups return lists.
    """

    def __init__(self, build_id: int, records: Iterable[TestExecutionRecord] = ()):
        self.build_id = build_id
        self._records: Tuple[TestExecutionRecord, ...] = tuple(records)
        self._by_name: Dict[TestIdentity, List[TestExecutionRecord]] = {}
        for record in self._records:
            self._by_name.setdefault(record.test_name, []).append(record)

    def passed_tests(self) -> Iterator[TestExecutionRecord]:
        return iter(self._records)

    def find_records(self, test_name: str) -> List[TestExecutionRecord]:
        return list(self._by_name.get(normalize_test_name(test_name), ()))

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"BuildStatisticsSnapshot(build_id={self.build_id!r}, records={len(self._records)})"


_DETAIL_FIELDS = (
    "current_run_id",
    "current_duration",
    "reference_run_id",
    "reference_duration",
    "reference_build_id",
)


@dataclass(frozen=True)
class RegressionReport:
    """A test that became slower than one of its corroborating executions."""

    test_name: TestIdentity
    current_run_id: int
    current_duration: int
    reference_run_id: int
    reference_duration: int
    reference_build_id: int
    slowdown_percent: int

    @property
    def problem_id(self) -> str:
        # Keyed by the current run only, so re-running detection is idempotent
        return f"{PROBLEM_TYPE}.{self.current_run_id}"

    @property
    def problem_type(self) -> str:
        return PROBLEM_TYPE

    @property
    def message(self) -> str:
        return f"Test '{self.test_name}' became {self.slowdown_percent}% slower"

    @property
    def detail(self) -> str:
        """Serialized slowdown facts attached to the build problem."""
        return ";".join(f"{name}={getattr(self, name)}" for name in _DETAIL_FIELDS)

    @staticmethod
    def parse_detail(detail: str) -> Dict[str, int]:
        """
        Read back a payload produced by :attr:`detail`.

        Raises:
            ValueError: If a field is missing or not an integer
        """
        values: Dict[str, int] = {}
        for chunk in detail.split(";"):
            if not chunk:
                continue
            key, sep, raw = chunk.partition("=")
            if not sep:
                raise ValueError(f"Malformed slowdown detail entry: '{chunk}'")
            values[key.strip()] = int(raw)

        missing = [name for name in _DETAIL_FIELDS if name not in values]
        if missing:
            raise ValueError(f"Slowdown detail is missing fields: {', '.join(missing)}")
        return values


@dataclass(frozen=True)
class BuildProblem:
    """What a problem sink keeps for each reported regression."""

    problem_id: str
    problem_type: str
    description: str
    additional_data: Optional[str] = None


__all__ = [
    "PROBLEM_TYPE",
    "TestIdentity",
    "normalize_test_name",
    "Build",
    "TestExecutionRecord",
    "BuildStatisticsSnapshot",
    "RegressionReport",
    "BuildProblem",
]
