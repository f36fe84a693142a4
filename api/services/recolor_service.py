"""
Recolor orchestration: validate -> resolve reachability -> prompt -> inference -> respond.

Each call is independent; nothing is kept between requests. Calls are not
idempotent because every generation uses a fresh random seed.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.exceptions import BadRequest
from middleware.logging_middleware import get_logger
from schemas.recolor import InpaintRequest, RecolorRequest, SegmentRequest
from services.prompt_service import generate_inpainting_prompt, generate_recolor_prompt, get_color_name
from services.replicate_service import ReplicateGateway

logger = get_logger(__name__)


@dataclass
class SegmentationOutcome:
    mask_url: str
    part_label: str
    bounding_box: Dict[str, float]
    confidence: float
    model: str
    click_x: Optional[int] = None
    click_y: Optional[int] = None


@dataclass
class InpaintOutcome:
    result_url: str
    prompt: str
    settings: Dict[str, Any]
    processing_time_ms: int


@dataclass
class RecolorOutcome:
    result_url: str
    mask_url: str
    prompt: str
    part_label: str
    settings: Dict[str, Any] = field(default_factory=dict)
    processing_time_ms: int = 0


def _require(params: Dict[str, Any]) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        noun = "parameter" if len(params) == 1 else "parameters"
        raise BadRequest(f"Missing required {noun}: {', '.join(params)}")


class RecolorOrchestrator:
    """Sequences segmentation and inpainting calls against the gateway"""

    def __init__(self, gateway: ReplicateGateway):
        self.gateway = gateway

    async def segment(self, request: SegmentRequest) -> SegmentationOutcome:
        """
        Pick the segmentation model for a click or auto-detect request.

        Placeholder: no model is called yet, the input image is echoed back
        as its own mask with an empty bounding box.
        """
        _require({"imageUrl": request.image_url})

        model = self.gateway.segmentation_model(request.auto_segment)
        if request.auto_segment:
            logger.info(f"Professional segmentation: auto-detect via {model}")
        else:
            logger.info(f"Professional segmentation: point ({request.click_x}, {request.click_y}) via {model}")

        return SegmentationOutcome(
            mask_url=request.image_url,
            part_label=request.furniture_part or "furniture_part",
            bounding_box={"x": 0, "y": 0, "width": 0, "height": 0},
            confidence=1.0,
            model=model,
            click_x=request.click_x,
            click_y=request.click_y,
        )

    async def inpaint(self, request: InpaintRequest) -> InpaintOutcome:
        """Repaint a masked furniture part with a material and color"""
        _require({"imageUrl": request.image_url, "maskUrl": request.mask_url, "color": request.color})

        image_url = self.gateway.resolve_public_url(request.image_url)
        mask_url = self.gateway.resolve_public_url(request.mask_url)

        color_name = get_color_name(request.color)
        prompt = generate_inpainting_prompt(request.furniture_part, request.material, color_name)

        logger.info(f"Professional inpainting with prompt: {prompt}")
        logger.info(f"Settings: strength={request.prompt_strength}, blur={request.mask_blur}")

        start_time = time.time()
        result_url = await self.gateway.inpaint(
            image_url=image_url,
            mask_url=mask_url,
            prompt=prompt,
            prompt_strength=request.prompt_strength,
            mask_blur=request.mask_blur,
        )
        processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(f"FLUX Fill Pro result: {result_url} ({processing_time_ms}ms)")

        return InpaintOutcome(
            result_url=result_url,
            prompt=prompt,
            settings={
                "promptStrength": request.prompt_strength,
                "maskBlur": request.mask_blur,
                "material": request.material,
                "furniturePart": request.furniture_part,
                "color": color_name,
            },
            processing_time_ms=processing_time_ms,
        )

    async def recolor(self, request: RecolorRequest) -> RecolorOutcome:
        """One-shot color change of a furniture photo"""
        _require({"imageUrl": request.image_url, "color": request.color})

        logger.info(f"Starting professional color change: {request.color} on {request.furniture_part}")

        color_name = get_color_name(request.color)
        prompt = generate_recolor_prompt(color_name, request.material, request.furniture_part)

        image_url = self.gateway.resolve_public_url(request.image_url)
        logger.info(f"Final image URL for Replicate: {image_url}")

        start_time = time.time()
        result_url = await self.gateway.recolor(image_url, prompt, prompt_strength=request.prompt_strength)
        processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(f"Color change complete: {result_url} ({processing_time_ms}ms)")

        return RecolorOutcome(
            result_url=result_url,
            mask_url=request.image_url,
            prompt=prompt,
            part_label=request.furniture_part,
            settings={
                "material": request.material,
                "color": color_name,
                "furniturePart": request.furniture_part,
            },
            processing_time_ms=processing_time_ms,
        )
