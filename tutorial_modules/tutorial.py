import time
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from tutorial_modules.cleanup_executor import CleanupExecutor, CleanupReport, Deleter, ManualCommand
from tutorial_modules.config import TutorialConfig
from tutorial_modules.error_handler import ErrorHandler
from tutorial_modules.errors import PollFailedError, PollTimeoutError
from tutorial_modules.resource_manager import ResourceManager
from tutorial_modules.resource_tracker import ResourceTracker
from tutorial_modules.status_poller import DEFAULT_FAILURE_STATES, PollOutcome, PollResult, wait_for
from tutorial_modules.tracked_resource import TrackedResource

YES_ANSWERS = ("y", "yes")


class Tutorial(ResourceManager):
    """Base class for a single-service getting-started walkthrough.

    Subclasses provision resources in ``provision``, recording each one with
    ``track``, and describe how to delete every kind they record in
    ``deleters``. ``run`` drives the whole thing: provision, confirm, clean up.
    """

    name = ""
    title = ""
    default_region = "us-east-1"

    def __init__(
        self,
        config: TutorialConfig,
        session=None,
        input_func: Callable[[str], str] = input,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(config.region, config.dry_run, session=session, log_dir=config.log_dir)
        self.config = config
        self.input = input_func
        self.sleep = sleep
        self.tracker = ResourceTracker(log=self.logger)
        self.executor = CleanupExecutor(
            self.deleters(), self.manual_cleanup_commands(), dry_run=config.dry_run, log=self.logger
        )
        self.error_handler = ErrorHandler(self.tracker, self.executor, log=self.logger)

    def provision(self) -> None:
        raise NotImplementedError

    def deleters(self) -> Dict[str, Deleter]:
        raise NotImplementedError

    def manual_cleanup_commands(self) -> Dict[str, ManualCommand]:
        return {}

    def track(self, kind: str, identifier: str) -> TrackedResource:
        return self.tracker.record(kind, identifier)

    def wait_for_state(
        self,
        describe_fn: Callable[[], Optional[str]],
        target_state: str,
        max_attempts: int,
        interval: float,
        label: str,
        failure_states: Iterable[str] = DEFAULT_FAILURE_STATES,
        required: bool = True,
    ) -> PollResult:
        self.logger.info(f"Waiting for {label} to reach {target_state}...")
        result = wait_for(
            describe_fn,
            target_state,
            max_attempts,
            interval,
            failure_states=failure_states,
            sleep=self.sleep,
            label=label,
            log=self.logger,
        )
        if result.ok:
            return result
        if not required:
            self.logger.warning(
                f"{label} has not reached {target_state} yet (last state: {result.last_state}); continuing"
            )
            return result
        if result.outcome is PollOutcome.FAILED:
            raise PollFailedError(label, result.last_state)
        raise PollTimeoutError(label, target_state, result.attempts, result.last_state)

    def confirm_cleanup(self) -> bool:
        if self.config.assume_yes:
            return True
        answer = self.input("Do you want to clean up all created resources? (y/n): ")
        return answer.strip().lower() in YES_ANSWERS

    def run(self) -> int:
        self.logger.info(f"Starting {self.title} at {datetime.now():%Y-%m-%d %H:%M:%S}")
        self.logger.info(f"Using AWS region: {self.region}")
        self.logger.info(f"Logging to {self.log_path}")
        self.error_handler.install_signal_handlers()

        try:
            with self.error_handler:
                self.provision()
                self._log_banner("CLEANUP CONFIRMATION")
                self._log_resources()
                if self.confirm_cleanup():
                    self._report_cleanup(self.error_handler.run_cleanup())
                else:
                    self._log_manual_cleanup()

            self.logger.info(f"{self.title} completed at {datetime.now():%Y-%m-%d %H:%M:%S}")
            self.logger.info(f"Log file: {self.log_path}")
            return 0
        finally:
            self.close_log()

    def _log_banner(self, heading: str) -> None:
        self.logger.info("===========================================")
        self.logger.info(heading)
        self.logger.info("===========================================")

    def _log_resources(self) -> None:
        self.logger.info("Resources created:")
        for line in self.tracker.summary_lines():
            self.logger.info(line)

    def _report_cleanup(self, report: CleanupReport) -> None:
        for line in report.summary_lines():
            self.logger.info(line)
        if report.failed:
            self.logger.warning("Some resources could not be deleted. To remove them manually, run:")
            for command in self.executor.manual_commands(report.failed):
                self.logger.warning(f"  {command}")
        elif report.skipped:
            self.logger.info(f"[DRY RUN] {len(report.skipped)} resource(s) left in place")
        else:
            self.logger.info("Cleanup completed successfully.")

    def _log_manual_cleanup(self) -> None:
        self.logger.info("Skipping cleanup. Resources will remain in your AWS account.")
        commands = self.executor.manual_commands(self.tracker.all())
        if commands:
            self.logger.info("To clean up manually, use the following commands:")
            for command in commands:
                self.logger.info(f"  {command}")
