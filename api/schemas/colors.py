"""
Pydantic schemas for color applications and recent colors
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.base import HEX_COLOR_PATTERN, CamelModel


class ColorApplicationCreate(CamelModel):
    project_id: str
    mask_id: str
    fill_hex: str = Field(..., pattern=HEX_COLOR_PATTERN)
    opacity: float = Field(0.8, ge=0, le=1)
    blend_mode: str = Field("multiply", min_length=1, max_length=16)


class ColorApplicationResponse(CamelModel):
    id: str
    project_id: str
    mask_id: str
    fill_hex: str
    opacity: float
    blend_mode: str
    created_at: datetime


class RecentColorCreate(CamelModel):
    project_id: Optional[str] = None
    hex: str = Field(..., pattern=HEX_COLOR_PATTERN)
    color_code: Optional[str] = Field(None, max_length=16)
    color_name: Optional[str] = None


class RecentColorResponse(CamelModel):
    id: str
    project_id: Optional[str] = None
    hex: str
    color_code: Optional[str] = None
    color_name: Optional[str] = None
    used_at: datetime
