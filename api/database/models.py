"""
Database models for the furniture recolor ledger
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """A furniture customization project"""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    preview_image_url = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships (rows are removed by ON DELETE CASCADE)
    images = relationship("ProjectImage", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
    color_applications = relationship(
        "ColorApplication", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    professional_results = relationship(
        "ProfessionalResult", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    canvas_state = relationship(
        "CanvasState", back_populates="project", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"


class ProjectImage(Base):
    """Uploaded furniture image with its decoded pixel dimensions"""

    __tablename__ = "project_images"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    original_image_path = Column(Text, nullable=False)
    mime_type = Column(String(32), nullable=False)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="images")
    masks = relationship("SegmentationMask", back_populates="image", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<ProjectImage(id={self.id}, project_id={self.project_id}, size={self.width}x{self.height})>"


class SegmentationMask(Base):
    """One segmentation attempt (manual click or auto-detect) against one image"""

    __tablename__ = "segmentation_masks"

    id = Column(String(36), primary_key=True, default=_uuid)
    image_id = Column(String(36), ForeignKey("project_images.id", ondelete="CASCADE"), nullable=False, index=True)
    click_x = Column(Integer, nullable=True)
    click_y = Column(Integer, nullable=True)
    mask_data = Column(Text, nullable=False)  # Base64 mask or URL
    bounding_box = Column(JSON, nullable=False)  # {"x", "y", "width", "height"}
    part_label = Column(Text, nullable=True)
    confidence = Column(Float, nullable=True)
    area = Column(Integer, nullable=True)
    material = Column(String(32), default="fabric")
    furniture_part = Column(String(32), default="cushion")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    image = relationship("ProjectImage", back_populates="masks")

    def __repr__(self):
        return f"<SegmentationMask(id={self.id}, image_id={self.image_id}, part='{self.part_label}')>"


class ColorApplication(Base):
    """A color choice bound to a specific mask"""

    __tablename__ = "color_applications"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    mask_id = Column(String(36), ForeignKey("segmentation_masks.id", ondelete="CASCADE"), nullable=False, index=True)
    fill_hex = Column(String(7), nullable=False)
    opacity = Column(Float, nullable=False, default=0.8)
    blend_mode = Column(String(16), nullable=False, default="multiply")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="color_applications")

    def __repr__(self):
        return f"<ColorApplication(id={self.id}, mask_id={self.mask_id}, fill_hex='{self.fill_hex}')>"


class ProfessionalResult(Base):
    """Durable record of one inference call's outcome"""

    __tablename__ = "professional_results"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    mask_id = Column(String(36), ForeignKey("segmentation_masks.id", ondelete="CASCADE"), nullable=False)
    original_image_url = Column(Text, nullable=False)
    mask_url = Column(Text, nullable=False)
    result_url = Column(Text, nullable=False)
    prompt = Column(Text, nullable=False)
    material = Column(String(32), nullable=False)
    furniture_part = Column(String(32), nullable=False)
    color = Column(String(7), nullable=False)
    prompt_strength = Column(Float, nullable=False, default=0.5)
    mask_blur = Column(Integer, nullable=False, default=0)
    processing_time_ms = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="professional_results")

    def __repr__(self):
        return f"<ProfessionalResult(id={self.id}, project_id={self.project_id}, color='{self.color}')>"


class RecentColor(Base):
    """Append-only list of recently used colors"""

    __tablename__ = "recent_colors"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    hex = Column(String(7), nullable=False)
    color_code = Column(String(16), nullable=True)
    color_name = Column(Text, nullable=True)
    used_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (Index("idx_recent_colors_used_at", "used_at"),)

    def __repr__(self):
        return f"<RecentColor(id={self.id}, hex='{self.hex}')>"


class CanvasState(Base):
    """Full canvas JSON snapshot, at most one per project"""

    __tablename__ = "canvas_states"

    id = Column(String(36), primary_key=True, default=_uuid)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, unique=True)
    canvas_json = Column(JSON, nullable=False)
    zoom = Column(Float, nullable=False, default=1.0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="canvas_state")

    def __repr__(self):
        return f"<CanvasState(project_id={self.project_id}, zoom={self.zoom})>"
