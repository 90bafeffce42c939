from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from typing import Optional

from mailshort_app.config import Settings
from mailshort_app.dependencies import get_rewrite_service, get_settings, get_short_domain
from mailshort_app.exceptions import (
    DocumentTooLargeError,
    EmptyDocumentError,
    JobCreationError,
    RetryTargetRejectedError,
    RewriteError,
)
from mailshort_app.schemas.rewrite import (
    RewriteRequestBody,
    RewriteResponse,
    SizeCheckRequest,
    SizeCheckResponse,
)
from mailshort_app.services.rewrite_service import DEFAULT_FILENAME, RewriteRequest, RewriteService
from mailshort_app.services.sizing import SIZE_MESSAGES, classify_size, encoded_length

router = APIRouter(prefix="/rewrite", tags=["rewrite"])


def _run_rewrite(service: RewriteService, request: RewriteRequest) -> RewriteResponse:
    """Run a rewrite and translate pipeline errors into HTTP errors"""
    try:
        result = service.rewrite(request)
    except (EmptyDocumentError, RetryTargetRejectedError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except DocumentTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=e.message)
    except JobCreationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not create job: {e.message}",
        )
    return RewriteResponse.model_validate(result)


@router.post("", response_model=RewriteResponse)
def rewrite_html(
    body: RewriteRequestBody,
    short_domain: str = Depends(get_short_domain),
    service: RewriteService = Depends(get_rewrite_service),
):
    """
    Shorten every eligible link in an HTML document.

    With retry_original set, only that URL is attempted (single-link retry).
    Sync route: the store session is blocking, FastAPI runs it in a thread.
    """
    request = RewriteRequest(
        html=body.html,
        short_domain=short_domain,
        filename=body.filename or DEFAULT_FILENAME,
        retry_original=body.retry_original,
        job_id=body.job_id,
        owner_id=body.owner_id,
    )
    return _run_rewrite(service, request)


@router.post("/upload", response_model=RewriteResponse)
def rewrite_upload(
    file: UploadFile = File(...),
    owner_id: Optional[str] = Form(None),
    short_domain: str = Depends(get_short_domain),
    service: RewriteService = Depends(get_rewrite_service),
):
    """Same as POST /rewrite, for an uploaded .html file"""
    try:
        # Cap is checked on the raw bytes, before decoding
        if file.size is not None:
            service.check_upload_size(file.size)
        # Never buffer more than one byte past the cap
        raw = file.file.read(service.settings.max_html_bytes + 1)
        service.check_upload_size(len(raw))
    except RewriteError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=e.message)

    request = RewriteRequest(
        html=raw.decode("utf-8", errors="replace"),
        short_domain=short_domain,
        filename=file.filename or DEFAULT_FILENAME,
        owner_id=owner_id,
        upload_bytes=len(raw),
    )
    return _run_rewrite(service, request)


@router.post("/size-check", response_model=SizeCheckResponse)
def size_check(body: SizeCheckRequest, app_settings: Settings = Depends(get_settings)):
    """Classify raw content before rewriting, so users are warned early"""
    size = encoded_length(body.html)
    size_class = classify_size(size, app_settings.soft_size_threshold, app_settings.hard_size_threshold)
    return SizeCheckResponse(bytes=size, size_class=size_class, message=SIZE_MESSAGES[size_class])
