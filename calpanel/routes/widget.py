from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from calpanel.widget.calendar_widget import get_widget

router = APIRouter()


@router.get("/widget/text")
async def get_widget_text() -> PlainTextResponse:
    """Last rendered panel text, color tags included."""
    widget = get_widget()
    return PlainTextResponse(widget.state.text)


@router.get("/widget/status")
async def get_widget_status() -> JSONResponse:
    """
    Get widget state and refresh loop status.

    Returns:
        JSON response with snapshot metadata, stale flag and scheduler status
    """
    try:
        widget = get_widget()
        return JSONResponse(
            status_code=200,
            content={
                "ok": True,
                "widget": widget.get_status()
            }
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get widget status: {str(e)}")


@router.post("/widget/refresh")
async def refresh_widget() -> JSONResponse:
    """
    Fetch events now and re-render the panel.

    Returns:
        JSON response with the new widget status; 503 if the fetch failed and
        the panel is showing stale data
    """
    widget = get_widget()
    await run_in_threadpool(widget.refresh)

    if widget.state.is_stale:
        raise HTTPException(status_code=503, detail=f"Calendar fetch failed: {widget.state.last_error}")

    return JSONResponse(
        status_code=200,
        content={
            "ok": True,
            "message": "Widget refreshed",
            "widget": widget.get_status()
        }
    )
