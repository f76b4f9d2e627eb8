# formarchive/routers/submissions.py
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from formarchive.core.settings import load_config
from formarchive.dependencies import get_s3_client_factory
from formarchive.infra.s3_client import S3ClientFactory
from formarchive.security.submissions_auth import extract_password, is_authorized
from formarchive.services.submissions import SubmissionStoreError, list_submissions

router = APIRouter(tags=["submissions"])
logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Headers": "Content-Type, X-Submissions-Password",
    "Access-Control-Max-Age": "86400",
}

UNAUTHORIZED_BODY = {"error": "Unauthorized", "message": "Invalid or missing password"}

ALL_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


def _json(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


@router.api_route("/submissions", methods=ALL_METHODS)
def submissions_endpoint(
    request: Request,
    client_factory: S3ClientFactory = Depends(get_s3_client_factory),
):
    """
    Password-gated listing of the most recent archived form submissions.

      GET /submissions?limit=50
      X-Submissions-Password: ...   (or ?password=...)

    Returns { "submissions": [...], "count": N }.
    """
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=PREFLIGHT_HEADERS)

    if request.method != "GET":
        return _json(405, {"message": "Method Not Allowed"})

    config = load_config()

    provided = extract_password(request.headers, request.query_params)
    if not is_authorized(provided, config.submissions_password):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning("Submissions request rejected ip=%s", client_ip)
        return _json(401, UNAUTHORIZED_BODY)

    try:
        page = list_submissions(
            request.query_params.get("limit"),
            config=config,
            client_factory=client_factory,
        )
    except SubmissionStoreError as e:
        # config missing and listing failure both end as 500, told apart by "error"
        return _json(500, {"error": e.error, "message": str(e)})

    return _json(200, page.to_dict())


async def submissions_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Methods outside ALL_METHODS (TRACE, PROPFIND, ...) are rejected by the
    router itself; give them the same 405 body and CORS header as the rest.
    """
    if exc.status_code == 405 and request.url.path == "/submissions":
        return _json(405, {"message": "Method Not Allowed"})
    return await http_exception_handler(request, exc)
