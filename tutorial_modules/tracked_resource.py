from dataclasses import dataclass


@dataclass(frozen=True)
class TrackedResource:
    """A resource created during a tutorial run.

    ``kind`` selects the delete operation used during cleanup and
    ``identifier`` is the name, ID or ARN returned by the create call.
    """

    kind: str
    identifier: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.identifier}"
