import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from tutorial_modules.errors import AwsCommandError

logger = logging.getLogger(__name__)

NOT_FOUND_MARKERS = ("NotFound", "NoSuch", "NonExistent")


@dataclass
class CallResult:
    operation: str
    response: Optional[Dict[str, Any]] = None
    error: Optional[AwsCommandError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.response if self.response is not None else {}


def invoke(client: Any, operation: str, **kwargs) -> CallResult:
    """Call a boto3 client operation by name and capture the outcome."""
    try:
        response = getattr(client, operation)(**kwargs)
    except ClientError as e:
        error = e.response.get("Error", {})
        return CallResult(
            operation,
            error=AwsCommandError(operation, error.get("Code", "Unknown"), error.get("Message", str(e))),
        )
    except BotoCoreError as e:
        return CallResult(operation, error=AwsCommandError(operation, e.__class__.__name__, str(e)))
    logger.debug(f"{operation} succeeded")
    return CallResult(operation, response=response)


def is_not_found(error: Optional[AwsCommandError]) -> bool:
    if error is None:
        return False
    return any(marker in error.code for marker in NOT_FOUND_MARKERS)
