from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Request
from fastapi.responses import RedirectResponse

from mailshort_app.config import Settings
from mailshort_app.dependencies import get_click_recorder, get_redirect_service, get_settings
from mailshort_app.services.click_recorder import ClickRecorder
from mailshort_app.services.redirect_service import RedirectService, build_click_message

router = APIRouter(tags=["redirect"])


@router.get("/r/{code}")
async def redirect_to_original(
    code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    redirect_service: RedirectService = Depends(get_redirect_service),
    recorder: ClickRecorder = Depends(get_click_recorder),
    app_settings: Settings = Depends(get_settings),
):
    """
    Redirect to the original URL.

    Flow:
    1. Resolve the code using cache-aside (DB only on a cache miss)
    2. Schedule the click write as a background task
    3. Redirect immediately

    The click write runs after the response has been sent; its outcome
    never reaches the client.
    """
    original_url = await redirect_service.resolve(code)

    if not original_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )

    # The raw address is hashed here and not kept anywhere
    message = build_click_message(
        code,
        request.headers,
        request.client.host if request.client else None,
        app_settings.ip_hash_salt,
    )
    background_tasks.add_task(recorder.record, message)

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
