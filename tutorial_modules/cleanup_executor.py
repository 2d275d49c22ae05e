import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from tutorial_modules.aws_call import CallResult
from tutorial_modules.tracked_resource import TrackedResource

logger = logging.getLogger(__name__)

Deleter = Callable[[str], Optional[CallResult]]
ManualCommand = Union[str, Callable[[str], str]]


@dataclass
class CleanupReport:
    deleted: List[TrackedResource] = field(default_factory=list)
    failed: List[TrackedResource] = field(default_factory=list)
    skipped: List[TrackedResource] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary_lines(self) -> List[str]:
        lines = [f"Deleted {len(self.deleted)} resource(s), {len(self.failed)} failed"]
        lines.extend(f"  - not deleted: {resource}" for resource in self.failed)
        return lines


class CleanupExecutor:
    """Deletes tracked resources newest-first, one delete call per resource.

    A failing delete is logged and the loop moves on to the next resource.
    Nothing is retried.
    """

    def __init__(
        self,
        deleters: Dict[str, Deleter],
        manual_commands: Optional[Dict[str, ManualCommand]] = None,
        dry_run: bool = False,
        log: Optional[logging.Logger] = None,
    ):
        self.deleters = dict(deleters)
        self.logger = log or logger
        self.manual_command_templates = dict(manual_commands or {})
        self.dry_run = dry_run

    @property
    def kinds(self) -> Set[str]:
        return set(self.deleters)

    def missing_kinds(self, kinds: Iterable[str]) -> Set[str]:
        return set(kinds) - self.kinds

    def cleanup(
        self, resources: Iterable[TrackedResource], report: Optional[CleanupReport] = None
    ) -> CleanupReport:
        """Delete ``resources`` newest-first, filling ``report`` as it goes."""
        report = report if report is not None else CleanupReport()
        for resource in reversed(list(resources)):
            if self.dry_run:
                self.logger.info(f"[DRY RUN] Would delete {resource.kind}: {resource.identifier}")
                report.skipped.append(resource)
                continue

            if self._delete(resource):
                report.deleted.append(resource)
            else:
                report.failed.append(resource)
        return report

    def _delete(self, resource: TrackedResource) -> bool:
        deleter = self.deleters.get(resource.kind)
        if deleter is None:
            self.logger.warning(f"Don't know how to delete {resource.kind}: {resource.identifier}")
            return False

        self.logger.info(f"Deleting {resource.kind}: {resource.identifier}")
        try:
            result: Any = deleter(resource.identifier)
        except Exception as e:
            self.logger.warning(f"Failed to delete {resource.kind} {resource.identifier}: {e}")
            return False

        if isinstance(result, CallResult) and not result.ok:
            self.logger.warning(f"Failed to delete {resource.kind} {resource.identifier}: {result.error}")
            return False

        self.logger.info(f"Successfully deleted {resource.kind} {resource.identifier}")
        return True

    def manual_commands(self, resources: Iterable[TrackedResource]) -> List[str]:
        commands = []
        for resource in reversed(list(resources)):
            template = self.manual_command_templates.get(resource.kind)
            if callable(template):
                commands.append(template(resource.identifier))
            elif template:
                commands.append(template.format(identifier=resource.identifier))
        return commands
