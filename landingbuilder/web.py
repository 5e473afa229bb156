"""Server-rendered pages."""
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

GREETING_NAME = "Ernestico 🚀"


def _template_environment() -> Jinja2Templates:
    return Jinja2Templates(directory=str(TEMPLATE_DIR))


def register_ui_routes(router: APIRouter, *, templates: Jinja2Templates | None = None) -> None:
    """Attach the HTML pages to ``router``."""

    templates = templates or _template_environment()

    @router.get("/hello", response_class=HTMLResponse, name="hello")
    def hello(request: Request):
        return templates.TemplateResponse(request, "hello.html", {"name": GREETING_NAME})


def create_ui_router() -> APIRouter:
    router = APIRouter(tags=["pages"])
    register_ui_routes(router)
    return router


__all__ = ["GREETING_NAME", "TEMPLATE_DIR", "create_ui_router", "register_ui_routes"]
