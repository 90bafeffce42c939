from pydantic import BaseModel, ConfigDict, computed_field
from typing import List, Optional, Tuple
from datetime import datetime

from mailshort_app.services.sizing import SIZE_MESSAGES, SizeClass, classify_size


class LinkSummary(BaseModel):
    code: str
    original_url: str
    job_id: int
    created_at: Optional[datetime] = None
    click_count: int

    model_config = ConfigDict(from_attributes=True)


class LinkPageResponse(BaseModel):
    items: List[LinkSummary]
    page: int
    page_size: int
    has_more: bool

    model_config = ConfigDict(from_attributes=True)


class LinkDetail(BaseModel):
    code: str
    original_url: str
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClickResponse(BaseModel):
    ts: datetime
    referer: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LinkAnalyticsResponse(BaseModel):
    link: LinkDetail
    total_clicks: int
    recent_clicks: List[ClickResponse]
    histogram: List[int]
    sparkline: List[Tuple[int, int]]

    model_config = ConfigDict(from_attributes=True)


class JobSummary(BaseModel):
    """A past job with its savings and deliverability signal"""
    id: int
    filename: str
    bytes_in: int
    bytes_out: int
    link_count: int
    created_at: Optional[datetime] = None
    size_class: SizeClass

    @computed_field
    @property
    def saved(self) -> int:
        return self.bytes_in - self.bytes_out

    @computed_field
    @property
    def size_message(self) -> str:
        return SIZE_MESSAGES[self.size_class]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_job(cls, job, soft_threshold: int, hard_threshold: int) -> "JobSummary":
        """Classify with the configured thresholds, same as rewrite results"""
        return cls(
            id=job.id,
            filename=job.filename,
            bytes_in=job.bytes_in,
            bytes_out=job.bytes_out,
            link_count=job.link_count,
            created_at=job.created_at,
            size_class=classify_size(job.bytes_out, soft_threshold, hard_threshold),
        )
