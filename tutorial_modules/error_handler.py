import logging
import signal
from typing import Optional

from tutorial_modules.cleanup_executor import CleanupExecutor, CleanupReport
from tutorial_modules.resource_tracker import ResourceTracker

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Runs cleanup once and exits non-zero when a tutorial step fails.

    Used as a context manager around the provisioning steps::

        with handler:
            tutorial.provision()
    """

    def __init__(
        self,
        tracker: ResourceTracker,
        executor: CleanupExecutor,
        exit_code: int = 1,
        log: Optional[logging.Logger] = None,
    ):
        self.tracker = tracker
        self.executor = executor
        self.exit_code = exit_code
        self.logger = log or logger
        self.report: Optional[CleanupReport] = None
        self._previous_sigterm = None

    @property
    def cleanup_done(self) -> bool:
        return self.report is not None

    def run_cleanup(self) -> CleanupReport:
        # set before deleting: an interrupted pass is not started again
        if self.report is None:
            self.report = CleanupReport()
            self.executor.cleanup(self.tracker.all(), report=self.report)
        return self.report

    def handle(self, error: BaseException) -> None:
        self.logger.error(f"ERROR: {error}")
        if self.tracker:
            self.logger.info("Attempting to clean up resources...")
        report = self.run_cleanup()
        for line in report.summary_lines():
            self.logger.info(line)
        for command in self.executor.manual_commands(report.failed):
            self.logger.info(f"  {command}")

    def install_signal_handlers(self) -> None:
        def on_terminate(signum, frame):
            raise KeyboardInterrupt(f"Received signal {signum}")

        self._previous_sigterm = signal.signal(signal.SIGTERM, on_terminate)

    def restore_signal_handlers(self) -> None:
        if self._previous_sigterm is not None:
            signal.signal(signal.SIGTERM, self._previous_sigterm)
            self._previous_sigterm = None

    def __enter__(self) -> "ErrorHandler":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is None or isinstance(exc, SystemExit):
                return False
            if isinstance(exc, KeyboardInterrupt):
                self.logger.info("Script interrupted. Running cleanup...")
            elif not isinstance(exc, Exception):
                return False
            self.handle(exc)
        finally:
            self.restore_signal_handlers()
        raise SystemExit(self.exit_code) from exc
