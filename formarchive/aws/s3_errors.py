# formarchive/aws/s3_errors.py
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from formarchive.core.settings import StorageConfig

_HINTS = {
    "NoSuchBucket": "Check S3_BUCKET_NAME; the bucket does not exist.",
    "AccessDenied": "Check the IAM/bucket policy (s3:PutObject, s3:ListBucket, s3:GetObject).",
    "InvalidAccessKeyId": "Check AWS_ACCESS_KEY_ID / ASSURE_AWS_ACCESS_KEY_ID.",
    "SignatureDoesNotMatch": "Check the secret key, AWS_REGION vs bucket region and clock sync (NTP).",
    "SlowDown": "S3 throttling; try again shortly.",
    "Throttling": "S3 throttling; try again shortly.",
    "RequestTimeout": "S3 timeout; try again shortly.",
}


def error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        err = exc.response.get("Error", {}) or {}
        return err.get("Message") or str(exc)
    return str(exc) or type(exc).__name__


def describe_s3_error(
    exc: Exception,
    config: StorageConfig,
    key: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Diagnostic details for a failed S3 call.

    Always carries the upstream error name plus the region/bucket/endpoint
    the call went to; ClientErrors add the S3 code, request id and HTTP
    status from the response metadata.
    """
    code: Optional[str] = None
    aws_request_id: Optional[str] = None
    aws_http: Optional[int] = None

    if isinstance(exc, ClientError):
        err = exc.response.get("Error", {}) or {}
        meta = exc.response.get("ResponseMetadata", {}) or {}
        code = err.get("Code")
        aws_request_id = meta.get("RequestId")
        status = meta.get("HTTPStatusCode")
        aws_http = int(status) if status is not None else None
    elif isinstance(exc, BotoCoreError):
        # NoCredentialsError, EndpointConnectionError, ...
        code = type(exc).__name__

    return {
        "error_type": type(exc).__name__,
        "code": code,
        "aws_request_id": aws_request_id,
        "aws_http": aws_http,
        "hint": _HINTS.get(code or ""),
        "region": config.region,
        "bucket": config.bucket_name,
        "endpoint": config.endpoint_url or "default",
        "key": key,
    }
