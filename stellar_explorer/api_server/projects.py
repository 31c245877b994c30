"""
FastAPI router for GET /api/projects: static-site directories under PROJECTS_ROOT.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Query

from stellar_explorer.config import Settings
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.api_server.dependencies import get_app_settings

logger = get_logger(__name__)

router = APIRouter(tags=["projects"])


def list_projects(root: Path, include_all: bool = False) -> list[dict[str, Any]]:
    """
    Directories under root sorted by name, hidden ones skipped. Unless
    include_all, only directories holding an index.html are returned.
    A missing root yields an empty list.
    """
    if not root.is_dir():
        return []
    projects: list[dict[str, Any]] = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if not entry.is_dir() or entry.name.startswith("."):
            continue
        has_index = (entry / "index.html").is_file()
        if not has_index and not include_all:
            continue
        projects.append(
            {
                "name": entry.name,
                "path": f"/projects/{entry.name}/",
                "hasIndex": has_index,
            }
        )
    return projects


@router.get("/projects")
def projects(
    all: bool = Query(False, description="Include directories without index.html"),
    settings: Settings = Depends(get_app_settings),
) -> list[dict[str, Any]]:
    found = list_projects(settings.projects_root, include_all=all)
    logger.info("projects_listed", root=str(settings.projects_root), count=len(found), include_all=all)
    return found
