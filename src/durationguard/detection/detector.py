"""
Regression detection across the builds of one pipeline.

The detector compares every watched, passed test of a finished build with
the same test in a reference build (the latest successfully finished earlier
build) and in every finished build between the two. Each comparison that the
decision policy calls slow becomes a :class:`RegressionReport`.

Provider failures never abort a detection run: a build whose statistics
cannot be fetched is skipped, a history query that fails leaves only the
reference build to compare against.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from durationguard import logger
from durationguard.config.settings import DecisionPolicy, slowdown_percent
from durationguard.history.providers import (
    HistoryProvider,
    ProblemSink,
    ReferenceBuildProvider,
    StatisticsProvider,
)
from durationguard.history.walker import builds_between
from durationguard.models import (
    Build,
    BuildStatisticsSnapshot,
    RegressionReport,
    TestExecutionRecord,
)


class RegressionDetector:
    """
    Finds tests that became slower than their earlier executions.

    Collaborators are injected; the detector holds no state between runs.

    Args:
        history_provider: Lists finished builds of a pipeline
        statistics_provider: Supplies passed-test records per build
        reference_provider: Finds the reference build; defaults to
            ``history_provider`` when it implements the lookup
        problem_sink: Receives reports from :meth:`run`
        stop_at_first_regression: Report a test at most once, against the
            first corroborating build that shows the slowdown
    """

    def __init__(
        self,
        history_provider: HistoryProvider,
        statistics_provider: StatisticsProvider,
        reference_provider: Optional[ReferenceBuildProvider] = None,
        problem_sink: Optional[ProblemSink] = None,
        stop_at_first_regression: bool = False,
    ):
        self.history_provider = history_provider
        self.statistics_provider = statistics_provider
        if reference_provider is None and hasattr(history_provider, "previous_successfully_finished"):
            reference_provider = history_provider
        self.reference_provider = reference_provider
        self.problem_sink = problem_sink
        self.stop_at_first_regression = stop_at_first_regression

    def find_reference_build(self, build: Build) -> Optional[Build]:
        """Return the latest successfully finished build before ``build``, if any."""
        if self.reference_provider is None:
            logger.warning("No reference build provider configured")
            return None
        try:
            return self.reference_provider.previous_successfully_finished(build)
        except Exception as exc:
            logger.warning(f"Reference build lookup failed for build {build.build_id}: {exc}")
            return None

    def run(self, build: Build, policy: DecisionPolicy) -> List[RegressionReport]:
        """
        Detect regressions of ``build`` and hand each one to the problem sink.

        Returns:
            The reports that were sent to the sink
        """
        reference = self.find_reference_build(build)
        if reference is None:
            logger.info(f"Build {build.build_id}: no successfully finished build to compare with")
            return []

        reports = self.detect(policy, reference, build)

        if self.problem_sink is not None:
            for report in reports:
                self.problem_sink.report(
                    report.problem_id,
                    report.problem_type,
                    report.message,
                    report.detail,
                )
        return reports

    def detect(
        self,
        policy: DecisionPolicy,
        reference_build: Optional[Build],
        current_build: Build,
    ) -> List[RegressionReport]:
        """
        Compare ``current_build`` against ``reference_build`` and the builds between them.

        Args:
            policy: Decides which tests are watched and what counts as slow
            reference_build: Latest successfully finished earlier build, or
                ``None`` when there is none
            current_build: Build under inspection

        Returns:
            One report per (current test, slower-than corroborating record)
            pair, in current-build test order
        """
        if reference_build is None:
            return []

        current_stat = self._fetch_statistics(current_build)
        if current_stat is None:
            return []

        # One run's snapshots; None marks a build whose statistics are unavailable
        snapshots: Dict[Build, Optional[BuildStatisticsSnapshot]] = {
            reference_build: self._fetch_statistics(reference_build),
        }
        corroborating = [reference_build] + self._chain(reference_build, current_build)

        reports: List[RegressionReport] = []
        processed: Set[str] = set()
        for run in current_stat.passed_tests():
            name = run.test_name
            if not policy.is_interesting(name):
                continue
            if name in processed:
                continue
            processed.add(name)

            for build in corroborating:
                if build not in snapshots:
                    snapshots[build] = self._fetch_statistics(build)
                snapshot = snapshots[build]
                if snapshot is None:
                    continue

                found = self._compare(policy, run, build, snapshot)
                reports.extend(found)
                if found and self.stop_at_first_regression:
                    break

        if reports:
            logger.info(f"Build {current_build.build_id}: {len(reports)} test duration regression(s)")
        else:
            logger.debug(f"Build {current_build.build_id}: no test duration regressions")
        return reports

    def _compare(
        self,
        policy: DecisionPolicy,
        run: TestExecutionRecord,
        build: Build,
        snapshot: BuildStatisticsSnapshot,
    ) -> List[RegressionReport]:
        found: List[RegressionReport] = []
        for reference_run in self.statistics_provider.find_records_by_identity(snapshot, run.test_name):
            if not reference_run.participates:
                continue
            if not policy.is_slow(reference_run.duration_ms, run.duration_ms):
                continue

            slowdown = slowdown_percent(reference_run.duration_ms, run.duration_ms)
            if slowdown is None:
                continue

            report = RegressionReport(
                test_name=run.test_name,
                current_run_id=run.test_run_id,
                current_duration=run.duration_ms,
                reference_run_id=reference_run.test_run_id,
                reference_duration=reference_run.duration_ms,
                reference_build_id=build.build_id,
                slowdown_percent=slowdown,
            )
            logger.debug(f"{report.message} than in build {build.build_id}")
            found.append(report)
            if self.stop_at_first_regression:
                break
        return found

    def _chain(self, reference_build: Build, current_build: Build) -> List[Build]:
        try:
            chain = builds_between(self.history_provider, reference_build, current_build)
        except Exception as exc:
            logger.warning(
                f"Cannot list builds between {reference_build.build_id} and {current_build.build_id}: {exc}"
            )
            return []
        return [build for build in chain if build != reference_build]

    def _fetch_statistics(self, build: Build) -> Optional[BuildStatisticsSnapshot]:
        try:
            return self.statistics_provider.passed_test_statistics(build)
        except Exception as exc:
            logger.warning(f"Skipping build {build.build_id}: statistics unavailable ({exc})")
            return None


__all__ = ["RegressionDetector"]
