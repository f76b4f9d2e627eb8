import secrets
from typing import Mapping, Optional

PASSWORD_HEADER = "x-submissions-password"
PASSWORD_QUERY_PARAM = "password"


def extract_password(headers: Mapping[str, str], query_params: Mapping[str, str]) -> Optional[str]:
    # header wins over the query parameter
    header_value = next(
        (v for k, v in headers.items() if k.lower() == PASSWORD_HEADER and v),
        None,
    )
    return header_value or query_params.get(PASSWORD_QUERY_PARAM) or None


def is_authorized(provided: Optional[str], expected: Optional[str]) -> bool:
    """
    Shared-secret check for the submissions endpoint.
    No configured secret means nobody gets in.
    """
    if not expected or provided is None:
        return False
    # constant-time compare
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
