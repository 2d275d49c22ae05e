import logging
from typing import Iterator, List, Optional, Set, Tuple

from tutorial_modules.tracked_resource import TrackedResource

logger = logging.getLogger(__name__)


class ResourceTracker:
    """Ordered, append-only record of the resources a run has created."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._resources: List[TrackedResource] = []
        self.logger = log or logger

    def record(self, kind: str, identifier: str) -> TrackedResource:
        resource = TrackedResource(kind, identifier)
        self._resources.append(resource)
        self.logger.info(f"Created {kind}: {identifier}")
        return resource

    def all(self) -> Tuple[TrackedResource, ...]:
        return tuple(self._resources)

    def kinds(self) -> Set[str]:
        return {resource.kind for resource in self._resources}

    def summary_lines(self) -> List[str]:
        return [f"  - {resource}" for resource in self._resources] or ["  -"]

    def __iter__(self) -> Iterator[TrackedResource]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._resources)

    def __bool__(self) -> bool:
        return bool(self._resources)
