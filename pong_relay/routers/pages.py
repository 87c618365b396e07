from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

router = APIRouter(prefix="", tags=["pages"])

CONTROLLER_PAGE = "controller.html"


def _controller_page(request: Request) -> FileResponse:
    page = request.app.state.settings.static_dir / CONTROLLER_PAGE
    if not page.is_file():
        raise HTTPException(status_code=404, detail="Controller page not found")
    return FileResponse(page, media_type="text/html")


@router.get("/", include_in_schema=False)
async def index(request: Request):
    return _controller_page(request)


@router.get("/controller", include_in_schema=False)
async def controller(request: Request):
    return _controller_page(request)


# The page reads the room from its own URL.
@router.get("/r/{room}", include_in_schema=False)
async def room_controller(room: str, request: Request):
    return _controller_page(request)
