# formarchive/services/submissions.py
import json
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formarchive.aws.s3_errors import describe_s3_error, error_message
from formarchive.core.settings import StorageConfig, load_config
from formarchive.infra.s3_client import S3ClientFactory, make_s3_client
from formarchive.services.s3_keys import SUBMISSIONS_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIST_KEYS = 500
# Hard cap on objects fetched per request, independent of the listing size.
MAX_FETCH = 100

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class SubmissionStoreError(Exception):
    """Base class for retrieval failures that end the whole request."""

    error = "Submission store error"


class StorageNotConfiguredError(SubmissionStoreError):
    error = "S3 not configured"

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__("S3_BUCKET_NAME, AWS_ACCESS_KEY_ID, and AWS_SECRET_ACCESS_KEY must be set")


class SubmissionListingError(SubmissionStoreError):
    error = "Failed to fetch submissions"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.details = details or {}
        super().__init__(message)


@dataclass
class SubmissionPage:
    submissions: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.submissions)

    def to_dict(self) -> Dict[str, Any]:
        return {"submissions": self.submissions, "count": self.count}


def parse_limit(raw: Any) -> int:
    """
    Listing page size from a query value: the leading integer of the value,
    100 when missing or not numeric, clamped to [1, 500].
    """
    if raw is None:
        return DEFAULT_LIMIT
    if isinstance(raw, bool):
        return DEFAULT_LIMIT
    if isinstance(raw, int):
        value = raw
    else:
        m = _LEADING_INT.match(str(raw))
        if not m:
            return DEFAULT_LIMIT
        value = int(m.group(1))
    return max(1, min(value, MAX_LIST_KEYS))


def _last_modified(entry: Dict[str, Any]) -> datetime:
    ts = entry.get("LastModified")
    if not isinstance(ts, datetime):
        return _OLDEST
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def select_recent_keys(contents: List[Dict[str, Any]], cap: int = MAX_FETCH) -> List[str]:
    """.json keys only, newest first (stable for equal timestamps), at most ``cap``."""
    entries = [e for e in contents if (e.get("Key") or "").endswith(".json")]
    entries = sorted(entries, key=_last_modified, reverse=True)
    return [e["Key"] for e in entries[:cap]]


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} in stored submission")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} does not fit a float")
    return value


def _fetch_record(client, bucket: str, key: str) -> Dict[str, Any]:
    obj = client.get_object(Bucket=bucket, Key=key)
    body = obj["Body"].read()
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    # finite numbers only; responses are rendered with allow_nan=False
    data = json.loads(body, parse_constant=_reject_constant, parse_float=_finite_float)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return {"key": key, **data}


def list_submissions(
    limit: Any = None,
    *,
    config: Optional[StorageConfig] = None,
    client_factory: Optional[S3ClientFactory] = None,
) -> SubmissionPage:
    config = config or load_config()

    missing = config.missing_env()
    if missing:
        logger.error("Submissions requested but S3 is not configured: %s missing", ", ".join(missing))
        raise StorageNotConfiguredError(missing)

    max_keys = parse_limit(limit)
    try:
        client = (client_factory or make_s3_client)(config)
        resp = client.list_objects_v2(
            Bucket=config.bucket_name,
            Prefix=SUBMISSIONS_PREFIX,
            MaxKeys=max_keys,
        )
    except Exception as e:
        details = describe_s3_error(e, config)
        logger.error(
            "S3 submissions listing failed code=%s http=%s aws_request_id=%s bucket=%s: %s",
            details["code"], details["aws_http"], details["aws_request_id"],
            details["bucket"], error_message(e),
        )
        raise SubmissionListingError(error_message(e), details) from e

    keys = select_recent_keys(resp.get("Contents") or [])

    page = SubmissionPage()
    # one get_object at a time, in sorted order
    for key in keys:
        try:
            page.submissions.append(_fetch_record(client, config.bucket_name, key))
        except Exception as e:
            logger.warning("Failed to fetch object %s: %s", key, error_message(e))

    logger.info(
        "Listed submissions bucket=%s max_keys=%d selected=%d returned=%d",
        config.bucket_name, max_keys, len(keys), page.count,
    )
    return page
