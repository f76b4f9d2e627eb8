# formarchive/infra/s3_client.py

import logging
from typing import Any, Callable

import boto3
from botocore.config import Config

from formarchive.core.settings import StorageConfig

logger = logging.getLogger(__name__)

# Signature v4 only; retries and timeouts stay at the botocore defaults.
_BOTO_CFG = Config(signature_version="s3v4")

S3ClientFactory = Callable[[StorageConfig], Any]


def make_s3_client(config: StorageConfig):
    """S3 client scoped to the region, endpoint and credentials of one call."""
    client_kwargs = {
        "region_name": config.region,
        "aws_access_key_id": config.access_key_id,
        "aws_secret_access_key": config.secret_access_key,
        "config": _BOTO_CFG,
    }
    if config.endpoint_url:
        client_kwargs["endpoint_url"] = config.endpoint_url

    client = boto3.client("s3", **client_kwargs)
    logger.debug(
        "S3 client created region=%s bucket=%s endpoint=%s",
        config.region, config.bucket_name, config.endpoint_url or "default",
    )
    return client
