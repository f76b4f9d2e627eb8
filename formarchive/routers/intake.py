# formarchive/routers/intake.py

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from formarchive.dependencies import get_s3_client_factory
from formarchive.infra.s3_client import S3ClientFactory
from formarchive.schemas.archive import ArchiveResponse
from formarchive.services.archive import archive_submission_best_effort

router = APIRouter(prefix="/form-submissions", tags=["intake"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ArchiveResponse, status_code=202)
async def receive_submission(
    request: Request,
    client_factory: S3ClientFactory = Depends(get_s3_client_factory),
):
    """
    Accept a form submission and archive it to S3.
    Archival is best-effort: a skipped or failed upload still answers 202,
    with the outcome in the body.
    """
    try:
        submission = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    if not isinstance(submission, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    outcome = await run_in_threadpool(
        archive_submission_best_effort, submission, client_factory=client_factory
    )
    logger.info("INTAKE submission archive status=%s", outcome.status)
    return ArchiveResponse(archived=outcome)
