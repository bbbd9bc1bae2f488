"""Statistics collected over a test run."""

from __future__ import annotations

from dataclasses import dataclass

from .results import ExecutionResult, ExecutionStatuses


@dataclass
class RunStats:
    """Counts of tests expected, run, passed, failed and skipped during a run."""

    initial_run_count: int = 0
    """The number of tests expected to run when the run began."""
    final_run_count: int = 0
    """The number of tests that actually ran; less than the initial count if canceled."""
    passed: int = 0
    """The number of tests that passed, flaky ones included."""
    flaky: int = 0
    """The number of tests that passed only on a retry."""
    failed: int = 0
    exec_failed: int = 0
    skipped: int = 0

    def is_success(self) -> bool:
        """Return True unless the run was canceled or any test failed or could not run."""
        if self.initial_run_count > self.final_run_count:
            return False
        return self.failed == 0 and self.exec_failed == 0

    def on_test_finished(self, run_statuses: ExecutionStatuses) -> None:
        """Record a finished test, classified by the result of its last execution."""
        self.final_run_count += 1
        result = run_statuses.last_status().result
        if result is ExecutionResult.PASS:
            self.passed += 1
            if len(run_statuses) > 1:
                self.flaky += 1
        elif result is ExecutionResult.FAIL:
            self.failed += 1
        elif result is ExecutionResult.EXEC_FAIL:
            self.exec_failed += 1