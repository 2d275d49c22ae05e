import logging
import os
import secrets
from typing import Any, Dict, List, Optional

import boto3

from tutorial_modules.aws_call import CallResult, invoke

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ResourceManager:
    """Holds the boto3 session, per-service clients and the run's logger."""

    log_file = "tutorial.log"

    def __init__(self, region: str, dry_run: bool = False, session: Optional[Any] = None, log_dir: str = "."):
        self.region = region
        self.dry_run = dry_run
        self.session = session or boto3.session.Session(region_name=region)
        self.log_path = os.path.join(log_dir, self.log_file)
        self._clients: Dict[str, Any] = {}
        self.logger = self._setup_logger()

    def _setup_logger(self):
        logger = logging.getLogger(self.__class__.__name__)
        logger.setLevel(logging.INFO)
        formatter = logging.Formatter(LOG_FORMAT)
        if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                   for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        log_path = os.path.abspath(self.log_path)
        for h in list(logger.handlers):
            if isinstance(h, logging.FileHandler) and h.baseFilename != log_path:
                logger.removeHandler(h)
                h.close()
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == log_path for h in logger.handlers):
            file_handler = logging.FileHandler(log_path, mode="a")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        logger.propagate = False
        return logger

    def close_log(self) -> None:
        log_path = os.path.abspath(self.log_path)
        for h in list(self.logger.handlers):
            if isinstance(h, logging.FileHandler) and h.baseFilename == log_path:
                self.logger.removeHandler(h)
                h.close()

    def client(self, service: str) -> Any:
        if service not in self._clients:
            self._clients[service] = self.session.client(service, region_name=self.region)
        return self._clients[service]

    def call(self, service: str, operation: str, **kwargs) -> CallResult:
        return invoke(self.client(service), operation, **kwargs)

    def paginate(self, service: str, operation: str, result_key: str, **kwargs) -> List[Dict]:
        paginator = self.client(service).get_paginator(operation)
        items = []
        for page in paginator.paginate(**kwargs):
            items.extend(page.get(result_key, []))
        return items

    @staticmethod
    def resource_suffix(nbytes: int = 4) -> str:
        return secrets.token_hex(nbytes)
