"""
SchoolMap Backend - Static Asset Route
======================================

What:  Serves the web frontend from STATIC_ROOT.
How:   Catch-all GET registered after every API router. The requested path
       is resolved and must stay inside the static root; `/` and directory
       paths serve their index.html.
"""

import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.config import settings
from app.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Static"])


@router.get(
    "/{file_path:path}",
    include_in_schema=False,
    summary="Serve frontend assets",
)
async def serve_static(file_path: str) -> FileResponse:
    static_root = Path(settings.static_root).resolve()
    full_path = (static_root / file_path).resolve()

    # Resolved path must stay inside the static root (blocks ../ and symlinks out)
    if full_path != static_root and static_root not in full_path.parents:
        logger.warning("Rejected static path outside root: %s", file_path)
        raise ValidationError(message="Invalid file path")

    if full_path.is_dir():
        full_path = full_path / "index.html"

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path or "/")

    return FileResponse(path=str(full_path))
