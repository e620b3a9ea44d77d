"""HTML rendering of status matrices and error pages."""

from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

from .matrix import StatusMatrix
from .models.builds import StatusKind

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

# Statuses without a badge render as an empty cell.
BADGES = {
    StatusKind.SUCCEEDED: "btn-success",
    StatusKind.FAILED: "btn-danger",
    StatusKind.STARTED: "btn-warning",
}


def render_matrix(matrix: StatusMatrix, refresh_seconds: int = 30) -> str:
    """Render *matrix* as a self-refreshing HTML table."""
    return templates.get_template("dashboard.html").render(
        title=matrix.resource,
        matrix=matrix,
        badges=BADGES,
        refresh_seconds=refresh_seconds,
    )


def render_message(title: str, message: str, refresh_seconds: int = 30) -> str:
    """Render a plain message page; it refreshes too, so the display recovers on its own."""
    return templates.get_template("dashboard.html").render(
        title=title,
        message=message,
        refresh_seconds=refresh_seconds,
    )
