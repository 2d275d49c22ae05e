import os
from dataclasses import dataclass
from typing import Mapping, Optional

from tutorial_modules.errors import ConfigurationError


@dataclass
class TutorialConfig:
    region: str
    log_dir: str = "."
    assume_yes: bool = False
    dry_run: bool = False
    email: Optional[str] = None

    @classmethod
    def from_args(cls, args, default_region: str, environ: Optional[Mapping[str, str]] = None) -> "TutorialConfig":
        """Resolve settings from parsed CLI options and the environment.

        The region is taken from ``--region``, then ``AWS_REGION``, then
        ``AWS_DEFAULT_REGION`` and finally the tutorial's own default.
        """
        environ = os.environ if environ is None else environ
        region = (
            getattr(args, "region", None)
            or environ.get("AWS_REGION")
            or environ.get("AWS_DEFAULT_REGION")
            or default_region
        )
        if not region:
            raise ConfigurationError("No AWS region configured; pass --region or set AWS_REGION")

        return cls(
            region=region,
            log_dir=getattr(args, "log_dir", None) or ".",
            assume_yes=bool(getattr(args, "yes", False)),
            dry_run=bool(getattr(args, "dry_run", False)),
            email=getattr(args, "email", None),
        )
