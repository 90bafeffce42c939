from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from typing import List, Optional

from mailshort_app.config import Settings
from mailshort_app.dependencies import get_link_service, get_settings
from mailshort_app.schemas.link import JobSummary, LinkAnalyticsResponse, LinkPageResponse
from mailshort_app.services.csv_export import clicks_to_csv, export_filename
from mailshort_app.services.link_service import LinkService

router = APIRouter(tags=["links"])


@router.get("/links", response_model=LinkPageResponse)
def list_links(
    page: int = Query(1, ge=1),
    owner_id: Optional[str] = None,
    link_service: LinkService = Depends(get_link_service),
    app_settings: Settings = Depends(get_settings),
):
    """Links produced by rewrite jobs, newest first"""
    result = link_service.list_links(page=page, page_size=app_settings.links_page_size, owner_id=owner_id)
    return LinkPageResponse.model_validate(result)


@router.get("/links/{code}", response_model=LinkAnalyticsResponse)
def get_link_analytics(
    code: str,
    link_service: LinkService = Depends(get_link_service),
    app_settings: Settings = Depends(get_settings),
):
    """Link details, recent clicks and click histogram"""
    analytics = link_service.analytics(
        code,
        recent_limit=app_settings.recent_clicks_limit,
        bucket_count=app_settings.histogram_buckets,
    )
    if not analytics:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    return LinkAnalyticsResponse.model_validate(analytics)


@router.get("/links/{code}/export")
def export_link_clicks(code: str, link_service: LinkService = Depends(get_link_service)):
    """Download every click of a link as CSV"""
    if not link_service.get_link(code):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    body = clicks_to_csv(link_service.clicks_for_export(code))
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={
            "content-disposition": f'attachment; filename="{export_filename(code)}"',
            "cache-control": "no-store",
        },
    )


@router.get("/jobs/recent", response_model=List[JobSummary])
def recent_jobs(
    owner_id: str,
    link_service: LinkService = Depends(get_link_service),
    app_settings: Settings = Depends(get_settings),
):
    """Most recent rewrite jobs of one owner"""
    jobs = link_service.recent_jobs(owner_id, limit=app_settings.recent_jobs_limit)
    return [
        JobSummary.from_job(job, app_settings.soft_size_threshold, app_settings.hard_size_threshold)
        for job in jobs
    ]
