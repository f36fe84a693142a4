"""
Pydantic schemas for upload, segmentation, inpainting and recolor endpoints
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from schemas.base import CamelModel


class BoundingBox(CamelModel):
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0


# Requests
# imageUrl / maskUrl / color are optional here so the orchestrator can answer
# with the documented "Missing required parameter" message instead of a schema error.
class SegmentRequest(CamelModel):
    image_url: Optional[str] = None
    click_x: Optional[int] = None
    click_y: Optional[int] = None
    image_id: Optional[str] = None
    auto_segment: bool = False
    furniture_part: Optional[str] = None
    material: str = "fabric"


class InpaintRequest(CamelModel):
    image_url: Optional[str] = None
    mask_url: Optional[str] = None
    color: Optional[str] = None
    material: str = "fabric"
    furniture_part: str = "cushion"
    prompt_strength: float = Field(0.5, ge=0, le=1)
    mask_blur: int = Field(0, ge=0)
    project_id: Optional[str] = None
    mask_id: Optional[str] = None


class RecolorRequest(CamelModel):
    image_url: Optional[str] = None
    color: Optional[str] = None
    material: str = "fabric"
    furniture_part: str = "cushion"
    prompt_strength: float = Field(0.5, ge=0, le=1)
    project_id: Optional[str] = None
    mask_id: Optional[str] = None


# Responses
class UploadResponse(CamelModel):
    path: str
    full_url: str
    filename: str
    size: int
    mimetype: str
    image_id: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class SegmentResponse(CamelModel):
    mask_id: Optional[str] = None
    mask_url: str
    part_label: str
    bounding_box: BoundingBox
    confidence: float
    click_x: Optional[int] = None
    click_y: Optional[int] = None
    model: str


class InpaintResponse(CamelModel):
    result_url: str
    prompt: str
    settings: Dict[str, Any]
    result_id: Optional[str] = None


class RecolorResponse(CamelModel):
    result_url: str
    mask_url: str
    prompt: str
    part_label: str
    settings: Dict[str, Any]
    result_id: Optional[str] = None


class SegmentationMaskResponse(CamelModel):
    id: str
    image_id: str
    click_x: Optional[int] = None
    click_y: Optional[int] = None
    mask_data: str
    bounding_box: Dict[str, Any]
    part_label: Optional[str] = None
    confidence: Optional[float] = None
    area: Optional[int] = None
    material: Optional[str] = None
    furniture_part: Optional[str] = None
    created_at: datetime


class ProfessionalResultResponse(CamelModel):
    id: str
    project_id: str
    mask_id: str
    original_image_url: str
    mask_url: str
    result_url: str
    prompt: str
    material: str
    furniture_part: str
    color: str
    prompt_strength: float
    mask_blur: int
    processing_time_ms: Optional[int] = None
    created_at: datetime
