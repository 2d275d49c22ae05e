from typing import Optional


class TutorialError(Exception):
    """Base class for failures that abort a tutorial run."""


class ConfigurationError(TutorialError):
    pass


class AwsCommandError(TutorialError):
    """A call into the AWS API failed."""

    def __init__(self, operation: str, code: str, message: str):
        self.operation = operation
        self.code = code
        self.message = message
        super().__init__(f"{operation} failed ({code}): {message}")


class PollFailedError(TutorialError):
    def __init__(self, label: str, state: Optional[str]):
        self.label = label
        self.state = state
        super().__init__(f"{label} entered failure state {state}")


class PollTimeoutError(TutorialError):
    def __init__(self, label: str, target_state: str, attempts: int, state: Optional[str]):
        self.label = label
        self.target_state = target_state
        self.attempts = attempts
        self.state = state
        super().__init__(
            f"{label} did not reach {target_state} after {attempts} attempts (last state: {state})"
        )
