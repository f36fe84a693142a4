"""
Pydantic schemas for projects, images and canvas state
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from schemas.base import CamelModel
from schemas.colors import ColorApplicationResponse


# Request schemas
class ProjectCreate(CamelModel):
    """Schema for creating a project"""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    preview_image_url: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Schema for renaming or re-previewing a project"""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    preview_image_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        # Omit name to keep it; a project cannot be unnamed
        if v is None:
            raise ValueError("name cannot be null")
        return v


class ProjectImageCreate(CamelModel):
    """Image metadata, supplied once the browser has decoded the pixel dimensions"""

    original_image_path: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1, max_length=32)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class CanvasStateUpdate(CamelModel):
    canvas_json: Dict[str, Any]
    zoom: float = Field(1.0, gt=0)


# Response schemas
class ProjectResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    preview_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectImageResponse(CamelModel):
    id: str
    project_id: str
    original_image_path: str
    mime_type: str
    width: int
    height: int
    created_at: datetime


class ProjectDetailResponse(CamelModel):
    """Project with its images and color applications"""

    project: ProjectResponse
    images: List[ProjectImageResponse]
    color_applications: List[ColorApplicationResponse]


class CanvasStateResponse(CamelModel):
    id: str
    project_id: str
    canvas_json: Dict[str, Any]
    zoom: float
    updated_at: datetime


class DeleteResponse(CamelModel):
    message: str
