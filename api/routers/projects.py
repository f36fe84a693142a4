"""
Projects API routes: projects, their images, inpainting results and canvas state
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from core.dependencies import get_ledger
from schemas.projects import (
    CanvasStateResponse,
    CanvasStateUpdate,
    DeleteResponse,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectImageCreate,
    ProjectImageResponse,
    ProjectResponse,
    ProjectUpdate,
)
from schemas.recolor import ProfessionalResultResponse
from services.ledger_service import ProjectLedger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[ProjectResponse])
async def list_projects(ledger: ProjectLedger = Depends(get_ledger)):
    """List all projects, most recently updated first."""
    return await ledger.list_projects()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(project_data: ProjectCreate, ledger: ProjectLedger = Depends(get_ledger)):
    project = await ledger.create_project(project_data.model_dump())
    await ledger.commit()
    return project


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: str, ledger: ProjectLedger = Depends(get_ledger)):
    """
    Get a project with its images and color applications.
    """
    return await ledger.get_project_detail(project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: str, project_data: ProjectUpdate, ledger: ProjectLedger = Depends(get_ledger)):
    """
    Rename or re-preview a project.
    Only updates fields that are provided.
    """
    project = await ledger.update_project(project_id, project_data.model_dump(exclude_unset=True))
    await ledger.commit()
    return project


@router.delete("/{project_id}", response_model=DeleteResponse)
async def delete_project(project_id: str, ledger: ProjectLedger = Depends(get_ledger)):
    """
    Delete a project and everything recorded against it.
    """
    await ledger.delete_project(project_id)
    await ledger.commit()
    return DeleteResponse(message="Project deleted successfully")


@router.post("/{project_id}/images", response_model=ProjectImageResponse, status_code=status.HTTP_201_CREATED)
async def add_project_image(
    project_id: str,
    image_data: ProjectImageCreate,
    ledger: ProjectLedger = Depends(get_ledger),
):
    """
    Attach an uploaded image once the client knows its pixel dimensions.
    """
    image = await ledger.add_image(project_id, image_data.model_dump())
    await ledger.commit()
    return image


@router.get("/{project_id}/results", response_model=List[ProfessionalResultResponse])
async def list_professional_results(project_id: str, ledger: ProjectLedger = Depends(get_ledger)):
    return await ledger.list_professional_results(project_id)


@router.get("/{project_id}/canvas", response_model=CanvasStateResponse)
async def get_canvas_state(project_id: str, ledger: ProjectLedger = Depends(get_ledger)):
    return await ledger.get_canvas_state(project_id)


@router.put("/{project_id}/canvas", response_model=CanvasStateResponse)
async def save_canvas_state(
    project_id: str,
    canvas_data: CanvasStateUpdate,
    ledger: ProjectLedger = Depends(get_ledger),
):
    """Save the canvas snapshot; the last save wins."""
    state = await ledger.upsert_canvas_state(project_id, canvas_data.model_dump())
    await ledger.commit()
    return state
