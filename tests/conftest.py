import os
from argparse import Namespace
from unittest.mock import MagicMock, Mock, patch

import pytest
from botocore.exceptions import ClientError

from tutorial_modules.config import TutorialConfig


@pytest.fixture(autouse=True)
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'


@pytest.fixture(autouse=True)
def no_signal_handlers():
    with patch("tutorial_modules.error_handler.signal.signal") as mock_signal:
        yield mock_signal


@pytest.fixture
def config(tmp_path):
    return TutorialConfig.from_args(
        Namespace(region="us-west-2", log_dir=str(tmp_path), yes=True, dry_run=False, email="user@example.com"),
        default_region="us-west-2",
    )


@pytest.fixture
def clients():
    return {}


@pytest.fixture
def session(clients):
    """boto3 session stand-in handing out one MagicMock client per service."""

    def make_client(service, region_name=None):
        return clients.setdefault(service, MagicMock(name=service))

    mock_session = Mock()
    mock_session.client.side_effect = make_client
    return mock_session


@pytest.fixture
def client_error():
    def make(code="ValidationException", message="Something went wrong", operation="Operation"):
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    return make
