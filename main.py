import argparse
import logging
import sys

from tutorial_modules.config import TutorialConfig
from tutorial_modules.dynamodb_tutorial import DynamoDBTutorial
from tutorial_modules.errors import ConfigurationError
from tutorial_modules.lightsail_tutorial import LightsailTutorial
from tutorial_modules.s3_tutorial import S3Tutorial
from tutorial_modules.secrets_manager_tutorial import SecretsManagerTutorial
from tutorial_modules.sns_tutorial import SNSTutorial

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TUTORIALS = {
    tutorial.name: tutorial
    for tutorial in (LightsailTutorial, DynamoDBTutorial, SecretsManagerTutorial, S3Tutorial, SNSTutorial)
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AWS getting-started tutorial runner")
    parser.add_argument("tutorial", nargs="?", choices=sorted(TUTORIALS), help="Tutorial to run")
    parser.add_argument("--region", help="AWS region (default: AWS_REGION, AWS_DEFAULT_REGION, then the tutorial's own)")
    parser.add_argument("-l", "--list", action="store_true", help="List available tutorials")
    parser.add_argument("-y", "--yes", action="store_true", help="Clean up without asking for confirmation")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Log what cleanup would delete without deleting it")
    parser.add_argument("--email", help="Email address for the SNS subscription")
    parser.add_argument("--log-dir", default=".", help="Directory for the tutorial log file (default: .)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list or not args.tutorial:
        for name in sorted(TUTORIALS):
            print(f"  - {name}: {TUTORIALS[name].title}")
        return 0

    tutorial_cls = TUTORIALS[args.tutorial]
    try:
        config = TutorialConfig.from_args(args, tutorial_cls.default_region)
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return 1

    if config.dry_run:
        logger.info("=== DRY RUN MODE - No resources will be deleted ===")

    try:
        tutorial = tutorial_cls(config)
    except Exception as e:
        logger.error(f"Error: {e}")
        return 1

    try:
        return tutorial.run()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
