# formarchive/services/s3_keys.py
import random
import re
import string
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

SUBMISSIONS_PREFIX = "FormSubmissions/"
UNKNOWN_NAME = "Unknown"
MAX_NAME_LENGTH = 30
SHORT_ID_LENGTH = 8
_SHORT_ID_ALPHABET = string.digits + string.ascii_lowercase

_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")

_system_random = random.SystemRandom()


def s3_key_join(*parts: str) -> str:
    cleaned = [str(p).strip("/ ") for p in parts if p is not None and str(p).strip("/ ")]
    return "/".join(cleaned)


def _nested(data: Any, *path: str) -> Any:
    for part in path:
        if not isinstance(data, Mapping):
            return None
        data = data.get(part)
    return data


def first_name_candidate(submission: Mapping[str, Any]) -> str:
    # payload["First Name"] -> rawData.firstname -> Unknown; empty values fall through
    candidate = (
        _nested(submission, "payload", "First Name")
        or _nested(submission, "rawData", "firstname")
        or UNKNOWN_NAME
    )
    return str(candidate)


def sanitize_name(raw: str) -> str:
    name = _DISALLOWED.sub("", raw.strip())
    name = _WHITESPACE.sub("-", name)
    return name[:MAX_NAME_LENGTH] or UNKNOWN_NAME


def short_id(rng: Optional[random.Random] = None) -> str:
    """8 lowercase base-36 chars. Not checked for uniqueness."""
    rng = rng or _system_random
    return "".join(rng.choice(_SHORT_ID_ALPHABET) for _ in range(SHORT_ID_LENGTH))


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def build_submission_key(
    submission: Mapping[str, Any],
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    # FormSubmissions/{YYYY}/{MM}/{YYYY-MM-DD}_{name}_{shortid}.json  (UTC dates)
    ts = _as_utc(now)
    name = sanitize_name(first_name_candidate(submission))
    filename = f"{ts:%Y-%m-%d}_{name}_{short_id(rng)}.json"
    return s3_key_join(SUBMISSIONS_PREFIX, f"{ts:%Y}", f"{ts:%m}", filename)
