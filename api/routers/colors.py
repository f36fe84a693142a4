"""
Color application and recent color routes
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from core.dependencies import get_ledger
from schemas.colors import ColorApplicationCreate, ColorApplicationResponse, RecentColorCreate, RecentColorResponse
from services.ledger_service import ProjectLedger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/colors", response_model=ColorApplicationResponse, status_code=status.HTTP_201_CREATED)
async def save_color_application(color_data: ColorApplicationCreate, ledger: ProjectLedger = Depends(get_ledger)):
    """Bind a fill color to a segmentation mask."""
    application = await ledger.record_color_application(color_data.model_dump())
    await ledger.commit()
    return application


@router.get("/recent-colors", response_model=List[RecentColorResponse])
async def list_recent_colors(
    project_id: Optional[str] = Query(None, alias="projectId"),
    limit: int = Query(8, ge=1, le=50),
    ledger: ProjectLedger = Depends(get_ledger),
):
    """Recently used colors, newest first, one per hex value."""
    return await ledger.list_recent_colors(project_id=project_id, limit=limit)


@router.post("/recent-colors", response_model=RecentColorResponse, status_code=status.HTTP_201_CREATED)
async def add_recent_color(color_data: RecentColorCreate, ledger: ProjectLedger = Depends(get_ledger)):
    color = await ledger.add_recent_color(color_data.model_dump())
    await ledger.commit()
    return color
