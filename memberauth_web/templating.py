"""Jinja2 page rendering"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

templates_path = Path(__file__).parent / "templates"
jinja_env = Environment(
    loader=FileSystemLoader(templates_path),
    autoescape=select_autoescape(["html"]),
)


def _render_template_sync(template_name: str, context: dict) -> str:
    """Sync Jinja2 render (used from threadpool to avoid blocking event loop)."""
    template = jinja_env.get_template(template_name)
    return template.render(**context)


async def render_template_async(template_name: str, context: dict) -> str:
    """Render Jinja2 template in threadpool so the event loop is not blocked."""
    return await run_in_threadpool(_render_template_sync, template_name, context)


async def render_page(
    template_name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    html = await render_template_async(template_name, context or {})
    return HTMLResponse(html, status_code=status_code)
