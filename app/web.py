from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def create_router(telemetry_path: str, json_path: str) -> APIRouter:
    router = APIRouter(include_in_schema=False)

    @router.get("/", name="index", response_class=HTMLResponse)
    @router.get("/{path:path}", name="index_fallback", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "telemetry_path": telemetry_path,
                "json_path": json_path,
            },
        )

    return router
