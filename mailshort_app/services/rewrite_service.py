"""
Rewrite engine: replaces eligible links in an HTML email with short links.

Flow for one document:
1. Validate (non-empty, under the upload cap)
2. Scan the document for URL occurrences
3. Pick targets (eligible URLs, or the single URL being retried)
4. Create (or reuse) the job record
5. Allocate a short code per target; failures are per-URL values
6. Build an immutable URL -> short URL table from the successes
7. Apply the table to every occurrence and serialize
8. Record output size on the job

Partial success is a normal outcome: a URL whose allocation failed keeps
its original value in the document and is reported with its error so the
caller can retry just that URL.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mailshort_app.config import Settings
from mailshort_app.exceptions import (
    DocumentTooLargeError,
    EmptyDocumentError,
    JobCreationError,
    RetryTargetRejectedError,
)
from mailshort_app.logging_config import get_logger
from mailshort_app.models.job import Job, JobLink
from mailshort_app.services.allocator import AllocationResult, LinkAllocator
from mailshort_app.services.classifier import should_process
from mailshort_app.services.scanner import ScannedDocument, count_by_attribute, scan_document
from mailshort_app.services.sizing import SizeClass, classify_size, encoded_length

log = get_logger(__name__)

DEFAULT_FILENAME = "pasted.html"


@dataclass
class RewriteRequest:
    html: str
    short_domain: str
    filename: str = DEFAULT_FILENAME
    retry_original: Optional[str] = None
    job_id: Optional[int] = None
    owner_id: Optional[str] = None
    # Size of the raw upload when the document came from a file
    upload_bytes: Optional[int] = None

    @property
    def is_retry(self) -> bool:
        return bool(self.retry_original)


@dataclass(frozen=True)
class LinkResult:
    """Per-URL outcome: short_url on success, error otherwise"""
    original: str
    short_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.short_url is not None


@dataclass
class RewriteResult:
    job_id: int
    filename: str
    bytes_in: int
    bytes_out: int
    size_class: SizeClass
    html: str
    links: List[LinkResult] = field(default_factory=list)

    @property
    def saved(self) -> int:
        return self.bytes_in - self.bytes_out


def short_url_for(short_domain: str, code: str) -> str:
    return f"{short_domain}/r/{code}"


def build_substitution_table(results: Iterable[LinkResult]) -> Mapping[str, str]:
    """Read-only URL -> short URL mapping built from successful results only"""
    return MappingProxyType({r.original: r.short_url for r in results if r.ok})


class RewriteService:
    """
    Orchestrates scanner, classifier and allocator for one document.

    Dependencies are injected; the service reads no global configuration so
    its behaviour depends only on its inputs and the store.
    """

    def __init__(self, db: Session, allocator: LinkAllocator, settings: Settings):
        self.db = db
        self.allocator = allocator
        self.settings = settings

    def check_upload_size(self, size: int) -> None:
        """Raise DocumentTooLargeError if *size* bytes exceeds the cap"""
        if size > self.settings.max_html_bytes:
            raise DocumentTooLargeError(size, self.settings.max_html_bytes)

    def rewrite(self, request: RewriteRequest) -> RewriteResult:
        """Rewrite one document (or retry one URL of it). See module docstring."""
        # Step 1: validation (nothing is written before this passes)
        if request.upload_bytes is not None:
            self.check_upload_size(request.upload_bytes)
        if not request.html.strip():
            raise EmptyDocumentError()
        bytes_in = encoded_length(request.html)
        self.check_upload_size(bytes_in)

        filename = (request.filename or DEFAULT_FILENAME)[: self.settings.max_filename_length]

        # Step 2: scan
        document = scan_document(request.html)

        # Step 3: targets
        targets = self._select_targets(document, request)

        # Step 4: job
        job, reused = self._open_job(request, filename, bytes_in, len(targets))
        job_id = job.id

        # Step 5: allocate, one result per target
        results = [self._allocate(job_id, url, request) for url in targets]

        # Steps 6-7: substitute and serialize
        table = build_substitution_table(results)
        replaced = document.apply_substitutions(table)
        html_out = document.render()
        bytes_out = encoded_length(html_out)

        # Step 8: job stats
        succeeded = sum(1 for r in results if r.ok)
        self._finish_job(job, bytes_out, succeeded, reused)

        log.info(
            "rewrite_completed",
            job_id=job_id,
            retry=request.is_retry,
            occurrences=count_by_attribute(document),
            targets=len(targets),
            links_ok=succeeded,
            links_failed=len(results) - succeeded,
            attributes_rewritten=replaced,
            bytes_in=bytes_in,
            bytes_out=bytes_out,
        )

        return RewriteResult(
            job_id=job_id,
            filename=filename,
            bytes_in=bytes_in,
            bytes_out=bytes_out,
            size_class=classify_size(
                bytes_out,
                self.settings.soft_size_threshold,
                self.settings.hard_size_threshold,
            ),
            html=html_out,
            links=results,
        )

    def _select_targets(self, document: ScannedDocument, request: RewriteRequest) -> List[str]:
        if request.is_retry:
            # The retried URL is attempted even if it no longer appears in
            # the document, so the caller still sees success or failure.
            if not should_process(request.retry_original, request.short_domain):
                raise RetryTargetRejectedError(request.retry_original)
            return [request.retry_original]
        return document.candidate_urls(request.short_domain)

    def _open_job(
        self, request: RewriteRequest, filename: str, bytes_in: int, target_count: int
    ) -> Tuple[Job, bool]:
        """Return (job, reused): retries reuse their job when it still exists"""
        if request.is_retry and request.job_id is not None:
            job = self.db.get(Job, request.job_id)
            if job is not None:
                return job, True
            log.info("retry_job_missing", job_id=request.job_id)

        job = Job(
            filename=filename,
            bytes_in=bytes_in,
            bytes_out=0,
            link_count=target_count,
            owner_id=request.owner_id,
        )
        try:
            self.db.add(job)
            self.db.commit()
            self.db.refresh(job)
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("job_creation_failed", error=str(exc))
            raise JobCreationError(str(exc)) from exc
        return job, False

    def _allocate(self, job_id: int, original: str, request: RewriteRequest) -> LinkResult:
        allocation: AllocationResult = self.allocator.allocate(original, request.owner_id)
        if not allocation.ok:
            return LinkResult(original=original, error=allocation.error)

        self._record_job_link(job_id, allocation.code, original)
        return LinkResult(
            original=original,
            short_url=short_url_for(request.short_domain, allocation.code),
        )

    def _record_job_link(self, job_id: int, code: str, original: str) -> None:
        """Best-effort: a failed association never blocks the rewrite"""
        try:
            self.db.add(JobLink(job_id=job_id, link_code=code, original_url=original))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.warning("job_link_insert_failed", job_id=job_id, code=code, error=str(exc))

    def _finish_job(self, job: Job, bytes_out: int, succeeded: int, reused: bool) -> None:
        """Record output size and link count; failure here is logged, not raised"""
        job_id = job.id
        try:
            job.bytes_out = bytes_out
            job.link_count = (job.link_count or 0) + succeeded if reused else succeeded
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.warning("job_update_failed", job_id=job_id, error=str(exc))
