"""
Ledger of projects, images, masks, color applications and inpainting results.

All writes go through one AsyncSession and are only flushed here; the caller
commits once per request so related rows land together. A failed write
leaves the session for the caller to roll back.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFound, ValidationError
from database.models import (
    CanvasState,
    ColorApplication,
    ProfessionalResult,
    Project,
    ProjectImage,
    RecentColor,
    SegmentationMask,
)

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"  # PostgreSQL SQLSTATE

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def is_foreign_key_violation(error: IntegrityError) -> bool:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY" in str(orig).upper()


class ProjectLedger:
    """CRUD over the recolor bookkeeping tables"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        await self.session.commit()

    async def _require(self, model, entity_id: Optional[str], entity: str):
        row = await self.session.get(model, entity_id) if entity_id else None
        if row is None:
            raise NotFound(entity, entity_id)
        return row

    def _integrity_failure(self, e: IntegrityError, what: str, parent: str, parent_id: Optional[str]):
        """A foreign key violation means the parent disappeared underneath us; anything else is bad data"""
        if is_foreign_key_violation(e):
            logger.warning(f"Foreign key violation writing {what}: {e.orig}")
            return NotFound(parent, parent_id)
        logger.warning(f"Constraint violation writing {what}: {e.orig}")
        return ValidationError(f"Invalid {what} data", error=str(e.orig))

    async def _append(self, row, parent: str, parent_id: Optional[str]):
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise self._integrity_failure(e, type(row).__name__, parent, parent_id) from e
        await self.session.refresh(row)
        return row

    # Projects

    async def list_projects(self) -> List[Project]:
        result = await self.session.execute(select(Project).order_by(Project.updated_at.desc()))
        return list(result.scalars().all())

    async def create_project(self, data: Dict[str, Any]) -> Project:
        project = Project(**data)
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project)
        logger.info(f"Created project {project.id}")
        return project

    async def get_project(self, project_id: str) -> Project:
        return await self._require(Project, project_id, "Project")

    async def get_project_detail(self, project_id: str) -> Dict[str, Any]:
        project = await self.get_project(project_id)

        images = await self.session.execute(
            select(ProjectImage).where(ProjectImage.project_id == project_id).order_by(ProjectImage.created_at)
        )
        colors = await self.session.execute(
            select(ColorApplication)
            .where(ColorApplication.project_id == project_id)
            .order_by(ColorApplication.created_at)
        )

        return {
            "project": project,
            "images": list(images.scalars().all()),
            "color_applications": list(colors.scalars().all()),
        }

    async def update_project(self, project_id: str, data: Dict[str, Any]) -> Project:
        project = await self.get_project(project_id)

        for field, value in data.items():
            setattr(project, field, value)

        # Always update the timestamp
        project.updated_at = datetime.utcnow()

        try:
            await self.session.flush()
        except IntegrityError as e:
            raise self._integrity_failure(e, "project", "Project", project_id) from e
        await self.session.refresh(project)

        logger.debug(f"Updated project {project_id} (fields: {list(data.keys())})")
        return project

    async def delete_project(self, project_id: str) -> None:
        """Delete a project; images, masks, colors, results and canvas state go with it"""
        result = await self.session.execute(delete(Project).where(Project.id == project_id))
        if result.rowcount == 0:
            raise NotFound("Project", project_id)

        logger.info(f"Deleted project {project_id}")

    # Images

    async def add_image(self, project_id: str, data: Dict[str, Any]) -> ProjectImage:
        await self.get_project(project_id)
        image = ProjectImage(project_id=project_id, **data)
        return await self._append(image, "Project", project_id)

    async def get_image(self, image_id: str) -> ProjectImage:
        return await self._require(ProjectImage, image_id, "Image")

    # Masks, colors and results are append-only

    async def record_mask(self, image_id: str, data: Dict[str, Any]) -> SegmentationMask:
        await self.get_image(image_id)
        mask = SegmentationMask(image_id=image_id, **data)
        return await self._append(mask, "Image", image_id)

    async def get_mask(self, mask_id: str) -> SegmentationMask:
        return await self._require(SegmentationMask, mask_id, "Mask")

    async def list_masks(self, image_id: str) -> List[SegmentationMask]:
        await self.get_image(image_id)
        result = await self.session.execute(
            select(SegmentationMask)
            .where(SegmentationMask.image_id == image_id)
            .order_by(SegmentationMask.created_at.desc())
        )
        return list(result.scalars().all())

    async def record_color_application(self, data: Dict[str, Any]) -> ColorApplication:
        await self.get_project(data.get("project_id"))
        await self._require(SegmentationMask, data.get("mask_id"), "Mask")
        return await self._append(ColorApplication(**data), "Mask", data.get("mask_id"))

    async def record_professional_result(self, data: Dict[str, Any]) -> ProfessionalResult:
        await self.get_project(data.get("project_id"))
        await self._require(SegmentationMask, data.get("mask_id"), "Mask")
        result = await self._append(ProfessionalResult(**data), "Mask", data.get("mask_id"))
        logger.info(f"Recorded professional result {result.id} for project {result.project_id}")
        return result

    async def list_professional_results(self, project_id: str) -> List[ProfessionalResult]:
        await self.get_project(project_id)
        result = await self.session.execute(
            select(ProfessionalResult)
            .where(ProfessionalResult.project_id == project_id)
            .order_by(ProfessionalResult.created_at.desc())
        )
        return list(result.scalars().all())

    # Recent colors

    async def add_recent_color(self, data: Dict[str, Any]) -> RecentColor:
        project_id = data.get("project_id")
        if project_id:
            await self.get_project(project_id)
        return await self._append(RecentColor(**data), "Project", project_id)

    async def list_recent_colors(self, project_id: Optional[str] = None, limit: int = 8) -> List[RecentColor]:
        """Newest first, one entry per hex value"""
        query = select(RecentColor).order_by(RecentColor.used_at.desc())
        if project_id:
            query = query.where(RecentColor.project_id == project_id)

        result = await self.session.execute(query)

        seen = set()
        colors = []
        for color in result.scalars():
            key = color.hex.upper()
            if key in seen:
                continue
            seen.add(key)
            colors.append(color)
            if len(colors) >= limit:
                break
        return colors

    # Canvas state

    async def get_canvas_state(self, project_id: str, refresh: bool = False) -> CanvasState:
        query = select(CanvasState).where(CanvasState.project_id == project_id)
        if refresh:
            # The row may have been rewritten by a Core upsert behind the identity map
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        state = result.scalar_one_or_none()
        if state is None:
            raise NotFound("Canvas state", project_id)
        return state

    async def upsert_canvas_state(self, project_id: str, data: Dict[str, Any]) -> CanvasState:
        """
        Overwrite the project's single canvas row, creating it on first save.

        One INSERT ... ON CONFLICT (project_id) DO UPDATE, so concurrent first
        saves cannot both insert; the last statement to run wins.
        """
        await self.get_project(project_id)

        values = {**data, "updated_at": datetime.utcnow()}
        dialect_insert = UPSERT_INSERTS[self.session.get_bind().dialect.name]
        statement = (
            dialect_insert(CanvasState)
            .values(project_id=project_id, **values)
            .on_conflict_do_update(index_elements=[CanvasState.project_id], set_=values)
        )

        try:
            await self.session.execute(statement)
        except IntegrityError as e:
            raise self._integrity_failure(e, "canvas state", "Project", project_id) from e

        return await self.get_canvas_state(project_id, refresh=True)
