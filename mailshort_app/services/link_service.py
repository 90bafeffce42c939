from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from mailshort_app.models.click import ClickEvent
from mailshort_app.models.job import Job, JobLink
from mailshort_app.models.link import Link
from mailshort_app.services.click_aggregator import click_histogram, sparkline_points


@dataclass
class LinkListItem:
    code: str
    original_url: str
    job_id: int
    created_at: Optional[datetime]
    click_count: int


@dataclass
class LinkPage:
    items: List[LinkListItem]
    page: int
    page_size: int
    has_more: bool


@dataclass
class LinkAnalytics:
    link: Link
    total_clicks: int
    recent_clicks: List[ClickEvent]
    histogram: List[int]
    sparkline: List[Tuple[int, int]]


class LinkService:
    """
    Read-side queries behind the links and analytics endpoints.

    Nothing here writes to the database.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_link(self, code: str) -> Optional[Link]:
        return self.db.query(Link).filter(Link.code == code).first()

    def click_counts(self, codes: Sequence[str]) -> Dict[str, int]:
        """Click totals for *codes*; codes without clicks map to 0"""
        counts = {code: 0 for code in codes}
        if not codes:
            return counts

        rows = (
            self.db.query(ClickEvent.link_code, func.count(ClickEvent.id))
            .filter(ClickEvent.link_code.in_(list(codes)))
            .group_by(ClickEvent.link_code)
            .all()
        )
        counts.update({code: count for code, count in rows})
        return counts

    def list_links(self, page: int = 1, page_size: int = 20, owner_id: Optional[str] = None) -> LinkPage:
        """
        Links produced by jobs, newest first, with click counts.

        When owner_id is given only that owner's jobs are considered.
        """
        page = max(1, page)
        query = self.db.query(JobLink).join(Job, Job.id == JobLink.job_id)
        if owner_id is not None:
            query = query.filter(Job.owner_id == owner_id)

        total = query.count()
        rows = (
            query.order_by(JobLink.created_at.desc(), JobLink.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        counts = self.click_counts([r.link_code for r in rows])
        items = [
            LinkListItem(
                code=r.link_code,
                original_url=r.original_url,
                job_id=r.job_id,
                created_at=r.created_at,
                click_count=counts.get(r.link_code, 0),
            )
            for r in rows
        ]
        return LinkPage(
            items=items,
            page=page,
            page_size=page_size,
            has_more=page * page_size < total,
        )

    def analytics(self, code: str, recent_limit: int = 100, bucket_count: int = 30) -> Optional[LinkAnalytics]:
        """Link details, latest clicks and a histogram over those clicks"""
        link = self.get_link(code)
        if link is None:
            return None

        recent = (
            self.db.query(ClickEvent)
            .filter(ClickEvent.link_code == code)
            .order_by(ClickEvent.ts.desc(), ClickEvent.id.desc())
            .limit(recent_limit)
            .all()
        )

        histogram = click_histogram([c.ts for c in recent], bucket_count)
        return LinkAnalytics(
            link=link,
            total_clicks=self.click_counts([code])[code],
            recent_clicks=recent,
            histogram=histogram,
            sparkline=sparkline_points(histogram),
        )

    def clicks_for_export(self, code: str) -> List[ClickEvent]:
        """Every click of *code*, oldest first"""
        return (
            self.db.query(ClickEvent)
            .filter(ClickEvent.link_code == code)
            .order_by(ClickEvent.ts.asc(), ClickEvent.id.asc())
            .all()
        )

    def recent_jobs(self, owner_id: str, limit: int = 5) -> List[Job]:
        return (
            self.db.query(Job)
            .filter(Job.owner_id == owner_id)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .limit(limit)
            .all()
        )
