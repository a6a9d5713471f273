"""
HTML rendering.
Routes pass a view name and plain data; layouts are Jinja2 parent templates.
"""
import os
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from clinicsite.config import settings

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

SITE_LAYOUT = "layouts/site.html"
ADMIN_LAYOUT = "layouts/admin.html"
BARE_LAYOUT = "layouts/bare.html"

templates = Jinja2Templates(directory=TEMPLATES_DIR)


def render(
    request: Request,
    view: str,
    data: Optional[Mapping[str, Any]] = None,
    layout: Optional[str] = None,
    status_code: int = 200,
):
    """
    Render `view` (a template name without extension) inside `layout`.

    Every view extends the `layout` variable, so the same view can be
    rendered standalone (BARE_LAYOUT) or inside the site/admin chrome.
    """
    context = {
        "site_title": settings.SITE_TITLE,
        "layout": layout or SITE_LAYOUT,
        "flash_success": request.query_params.get("success"),
        "flash_error": request.query_params.get("error"),
    }
    context.update(data or {})
    return templates.TemplateResponse(request, f"{view}.html", context, status_code=status_code)


def redirect_to(path: str, fragment: str = "", **params: Any) -> RedirectResponse:
    """
    303 redirect to `path`, with optional query flags and #fragment.

    redirect_to("/admin/gallery", success=1) -> /admin/gallery?success=1
    """
    url = path
    if params:
        url = f"{url}?{urlencode(params)}"
    if fragment:
        url = f"{url}#{fragment}"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
