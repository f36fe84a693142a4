"""
Database module for the furniture recolor ledger
"""
from .models import (
    Base,
    CanvasState,
    ColorApplication,
    ProfessionalResult,
    Project,
    ProjectImage,
    RecentColor,
    SegmentationMask,
)

__all__ = [
    "Base",
    "Project",
    "ProjectImage",
    "SegmentationMask",
    "ColorApplication",
    "ProfessionalResult",
    "RecentColor",
    "CanvasState",
]
