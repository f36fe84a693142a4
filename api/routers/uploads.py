"""
Image upload route
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from PIL import Image

from core.dependencies import get_ledger, get_upload_store
from core.exceptions import BadRequest
from middleware.logging_middleware import get_logger
from schemas.recolor import UploadResponse
from services.ledger_service import ProjectLedger
from services.storage_service import UploadStore

logger = get_logger(__name__)
router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    project_id: Optional[str] = Form(None, alias="projectId"),
    store: UploadStore = Depends(get_upload_store),
    ledger: ProjectLedger = Depends(get_ledger),
):
    """
    Store a furniture photo under /uploads.

    With a projectId the image dimensions are probed and a project image row
    is recorded. A failed probe only logs a warning; the upload itself still
    succeeds without the row.
    """
    if image is None:
        raise BadRequest("No file uploaded")

    if project_id:
        await ledger.get_project(project_id)

    # One byte past the limit is enough to know the upload is too large
    data = await image.read(store.max_file_size + 1)
    stored = await store.save(data, image.content_type, image.filename)

    response = UploadResponse(
        path=stored.path,
        full_url=stored.full_url,
        filename=stored.filename,
        size=stored.size,
        mimetype=stored.mimetype,
    )

    if not project_id:
        return response

    try:
        width, height = await store.dimensions(stored.path)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Could not read dimensions of {stored.path}, skipping image record: {e}")
        return response

    project_image = await ledger.add_image(
        project_id,
        {
            "original_image_path": stored.path,
            "mime_type": stored.mimetype,
            "width": width,
            "height": height,
        },
    )
    await ledger.commit()

    response.image_id = project_image.id
    response.width = width
    response.height = height
    return response
