# formarchive/services/archive.py
"""
Archive form submissions to S3 for backup/audit.

``archive_submission`` never raises for configuration or store problems:
the result says what happened and the caller decides whether a failed
archive matters. ``archive_submission_best_effort`` is the "log and carry
on" variant used by the intake endpoint.
"""
import json
import logging
import random
from datetime import datetime
from typing import Any, Mapping, Optional

from formarchive.aws.s3_errors import describe_s3_error, error_message
from formarchive.core.settings import StorageConfig, load_config
from formarchive.infra.s3_client import S3ClientFactory, make_s3_client
from formarchive.schemas.archive import Failed, Skipped, Uploaded, UploadOutcome
from formarchive.services.s3_keys import build_submission_key

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"


def serialize_submission(submission: Mapping[str, Any]) -> str:
    # strict JSON only: NaN/Infinity raise ValueError
    return json.dumps(submission, indent=2, ensure_ascii=False, allow_nan=False)


def archive_submission(
    submission: Mapping[str, Any],
    *,
    config: Optional[StorageConfig] = None,
    client_factory: Optional[S3ClientFactory] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> UploadOutcome:
    config = config or load_config()

    missing = config.missing_env()
    if missing:
        logger.info("S3 upload skipped: %s not set", ", ".join(missing))
        return Skipped(missing=missing)

    key = None
    try:
        client = (client_factory or make_s3_client)(config)
        key = build_submission_key(submission, now=now, rng=rng)
        client.put_object(
            Bucket=config.bucket_name,
            Key=key,
            Body=serialize_submission(submission).encode("utf-8"),
            ContentType=CONTENT_TYPE_JSON,
        )
    except Exception as e:
        details = describe_s3_error(e, config, key=key)
        logger.error(
            "S3 upload failed code=%s http=%s aws_request_id=%s bucket=%s region=%s endpoint=%s: %s",
            details["code"], details["aws_http"], details["aws_request_id"],
            details["bucket"], details["region"], details["endpoint"], error_message(e),
        )
        return Failed(error=error_message(e), details=details)

    logger.info("Submission uploaded to S3: %s", key)
    return Uploaded(key=key)


def archive_submission_best_effort(submission: Mapping[str, Any], **kwargs) -> UploadOutcome:
    """Archive without ever blocking the caller; failures are only logged."""
    outcome = archive_submission(submission, **kwargs)
    if isinstance(outcome, Failed):
        logger.warning("S3 archive failed (non-blocking): %s", outcome.error)
    return outcome
