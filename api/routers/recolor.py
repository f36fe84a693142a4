"""
Segmentation, inpainting and one-shot recolor endpoints
"""
import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.dependencies import get_ledger, get_orchestrator
from core.exceptions import BadRequest, InvalidModelOutput, ProviderError, RecolorError
from schemas.base import HEX_COLOR_PATTERN
from schemas.recolor import (
    InpaintRequest,
    InpaintResponse,
    RecolorRequest,
    RecolorResponse,
    SegmentationMaskResponse,
    SegmentRequest,
    SegmentResponse,
)
from services.ledger_service import ProjectLedger
from services.recolor_service import RecolorOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


def _inference_failure(message: str, exc: RecolorError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "error": exc.error if exc.error is not None else exc.message},
    )


async def _check_result_target(ledger: ProjectLedger, project_id: Optional[str], mask_id: Optional[str], color: Optional[str]):
    """Fail before the provider call if the outcome could not be recorded afterwards"""
    if not (project_id and mask_id):
        return
    if color and not re.match(HEX_COLOR_PATTERN, color):
        raise BadRequest("Color must be a #RRGGBB hex value to record a result")
    await ledger.get_project(project_id)
    await ledger.get_mask(mask_id)


@router.post("/segment-professional", response_model=SegmentResponse)
async def segment_professional(
    request: SegmentRequest,
    orchestrator: RecolorOrchestrator = Depends(get_orchestrator),
    ledger: ProjectLedger = Depends(get_ledger),
):
    """
    Select a furniture part by click or auto-detect.

    The segmentation itself is a placeholder that echoes the input image as the mask.
    When imageId is given the attempt is recorded and its id returned as maskId.
    """
    outcome = await orchestrator.segment(request)

    mask_id = None
    if request.image_id:
        mask_data = {
            "click_x": outcome.click_x,
            "click_y": outcome.click_y,
            "mask_data": outcome.mask_url,
            "bounding_box": outcome.bounding_box,
            "part_label": outcome.part_label,
            "confidence": outcome.confidence,
            "material": request.material,
        }
        if request.furniture_part:
            mask_data["furniture_part"] = request.furniture_part

        mask = await ledger.record_mask(request.image_id, mask_data)
        await ledger.commit()
        mask_id = mask.id

    return SegmentResponse(
        mask_id=mask_id,
        mask_url=outcome.mask_url,
        part_label=outcome.part_label,
        bounding_box=outcome.bounding_box,
        confidence=outcome.confidence,
        click_x=outcome.click_x,
        click_y=outcome.click_y,
        model=outcome.model,
    )


@router.get("/images/{image_id}/masks", response_model=List[SegmentationMaskResponse])
async def list_image_masks(image_id: str, ledger: ProjectLedger = Depends(get_ledger)):
    return await ledger.list_masks(image_id)


@router.post("/inpaint-professional", response_model=InpaintResponse)
async def inpaint_professional(
    request: InpaintRequest,
    orchestrator: RecolorOrchestrator = Depends(get_orchestrator),
    ledger: ProjectLedger = Depends(get_ledger),
):
    """Repaint the masked part with FLUX Fill Pro."""
    await _check_result_target(ledger, request.project_id, request.mask_id, request.color)

    try:
        outcome = await orchestrator.inpaint(request)
    except (ProviderError, InvalidModelOutput) as e:
        logger.error(f"Professional inpainting error: {e}")
        return _inference_failure("Failed to apply professional material change", e)

    result_id = None
    if request.project_id and request.mask_id:
        result = await ledger.record_professional_result(
            {
                "project_id": request.project_id,
                "mask_id": request.mask_id,
                "original_image_url": request.image_url,
                "mask_url": request.mask_url,
                "result_url": outcome.result_url,
                "prompt": outcome.prompt,
                "material": request.material,
                "furniture_part": request.furniture_part,
                "color": request.color,
                "prompt_strength": request.prompt_strength,
                "mask_blur": request.mask_blur,
                "processing_time_ms": outcome.processing_time_ms,
            }
        )
        await ledger.commit()
        result_id = result.id

    return InpaintResponse(
        result_url=outcome.result_url,
        prompt=outcome.prompt,
        settings=outcome.settings,
        result_id=result_id,
    )


@router.post("/professional-recolor", response_model=RecolorResponse)
async def professional_recolor(
    request: RecolorRequest,
    orchestrator: RecolorOrchestrator = Depends(get_orchestrator),
    ledger: ProjectLedger = Depends(get_ledger),
):
    """One-shot furniture color change."""
    await _check_result_target(ledger, request.project_id, request.mask_id, request.color)

    try:
        outcome = await orchestrator.recolor(request)
    except (ProviderError, InvalidModelOutput) as e:
        logger.error(f"Color change error: {e}")
        return _inference_failure("Failed to change furniture color", e)

    result_id = None
    if request.project_id and request.mask_id:
        result = await ledger.record_professional_result(
            {
                "project_id": request.project_id,
                "mask_id": request.mask_id,
                "original_image_url": request.image_url,
                "mask_url": outcome.mask_url,
                "result_url": outcome.result_url,
                "prompt": outcome.prompt,
                "material": request.material,
                "furniture_part": request.furniture_part,
                "color": request.color,
                "prompt_strength": request.prompt_strength,
                "mask_blur": 0,
                "processing_time_ms": outcome.processing_time_ms,
            }
        )
        await ledger.commit()
        result_id = result.id

    return RecolorResponse(
        result_url=outcome.result_url,
        mask_url=outcome.mask_url,
        prompt=outcome.prompt,
        part_label=outcome.part_label,
        settings=outcome.settings,
        result_id=result_id,
    )
