"""
Replicate inference gateway for furniture segmentation and inpainting.

Wraps the hosted models (FLUX Fill Pro, SDXL, SAM-2, Grounded-SAM) behind a
small async interface and normalizes their polymorphic outputs into a single
result URL.
"""
import asyncio
import logging
import random
import re
from typing import Any, Dict, Optional

import httpx
import replicate
from replicate.exceptions import ReplicateException

from core.exceptions import InvalidModelOutput, ProviderError
from services.prompt_service import NEGATIVE_PROMPT

logger = logging.getLogger(__name__)

LOOPBACK_PATTERN = re.compile(r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?(?=[/?#]|$)", re.IGNORECASE)


def resolve_public_url(url: str, public_base_url: Optional[str]) -> str:
    """
    Make an image URL reachable by the inference provider.

    Loopback URLs and server-relative paths are moved onto the public base
    URL. Without a configured base the URL is returned unchanged and the
    provider may reject it.
    """
    if not public_base_url or not url:
        return url

    base = public_base_url.rstrip("/")
    if url.startswith("/"):
        return f"{base}{url}"
    return LOOPBACK_PATTERN.sub(lambda match: base, url, count=1)


def _coerce_url(value: Any) -> Any:
    # Newer replicate clients hand back FileOutput objects that expose .url
    if not isinstance(value, str):
        url = getattr(value, "url", None)
        if isinstance(url, str):
            return url
    return value


def extract_result_url(output: Any) -> str:
    """
    Pull the result URL out of a model output.

    Precedence: bare string, head of a non-empty list, ``output`` key,
    ``url`` key, then the first value of the object that starts with
    ``http``. Anything else is an InvalidModelOutput.
    """
    output = _coerce_url(output)

    if isinstance(output, str):
        result = output
    elif isinstance(output, (list, tuple)) and len(output) > 0:
        result = _coerce_url(output[0])
    elif isinstance(output, dict):
        if isinstance(output.get("output"), str):
            result = output["output"]
        elif isinstance(output.get("url"), str):
            result = output["url"]
        else:
            result = next(
                (value for value in output.values() if isinstance(value, str) and value.startswith("http")),
                None,
            )
            if result is None:
                raise InvalidModelOutput(f"Invalid output format from model: {output!r}", payload=output)
    else:
        raise InvalidModelOutput(f"Invalid output format from model: {output!r}", payload=output)

    if not isinstance(result, str) or not result or not result.startswith("http"):
        raise InvalidModelOutput(f"Invalid result URL received: {result!r}", payload=output)

    return result


class ReplicateGateway:
    """Async facade over the Replicate client"""

    def __init__(
        self,
        api_token: str,
        public_base_url: Optional[str] = None,
        inpaint_model: str = "black-forest-labs/flux-fill-pro",
        recolor_model: str = "stability-ai/sdxl",
        segment_point_model: str = "meta/sam-2",
        segment_auto_model: str = "schananas/grounded_sam",
        api_base: str = "https://api.replicate.com/v1",
        user_agent: str = "furniture-recolor/1.0.0",
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.public_base_url = public_base_url
        self.inpaint_model = inpaint_model
        self.recolor_model = recolor_model
        self.segment_point_model = segment_point_model
        self.segment_auto_model = segment_auto_model
        self.api_base = api_base.rstrip("/")
        self.user_agent = user_agent
        self._http_transport = http_transport

        self._client = replicate.Client(api_token=api_token)

        if not api_token:
            logger.warning("Replicate API token not configured - inference calls will fail")
        else:
            logger.info("Replicate gateway initialized")

    def resolve_public_url(self, url: str) -> str:
        return resolve_public_url(url, self.public_base_url)

    def segmentation_model(self, auto_segment: bool) -> str:
        return self.segment_auto_model if auto_segment else self.segment_point_model

    async def run(self, model: str, input: Dict[str, Any]) -> Any:
        """Run a model and return its raw output. Errors are not retried."""
        logger.info(f"[Replicate] Calling model: {model}")
        try:
            output = await asyncio.to_thread(self._client.run, model, input=input)
        except ReplicateException as e:
            status = getattr(e, "status", None)
            logger.error(f"[Replicate] {model} failed (status={status}): {e}")
            raise ProviderError(f"Replicate call to {model} failed", status=status, error=str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"[Replicate] {model} network error: {e}")
            raise ProviderError(f"Replicate call to {model} failed", error=str(e)) from e
        except ValueError as e:
            # Malformed JSON from the API surfaces as a ValueError
            logger.error(f"[Replicate] {model} returned malformed response: {e}")
            raise ProviderError(f"Replicate call to {model} returned a malformed response", error=str(e)) from e

        logger.info(f"[Replicate] {model} returned output type: {type(output).__name__}")
        return output

    async def inpaint(
        self,
        image_url: str,
        mask_url: str,
        prompt: str,
        prompt_strength: float = 0.5,
        mask_blur: int = 0,
    ) -> str:
        """Repaint the masked region with FLUX Fill Pro"""
        output = await self.run(
            self.inpaint_model,
            {
                "image": image_url,
                "mask": mask_url,
                "prompt": prompt,
                "prompt_strength": prompt_strength,  # 0.4-0.6 keeps the original shape
                "mask_blur": mask_blur,  # 0 or 1 prevents bleeding
                "num_inference_steps": 28,
                "guidance_scale": 3.5,
                "seed": random.randint(0, 999999),
            },
        )
        return extract_result_url(output)

    async def recolor(self, image_url: str, prompt: str, prompt_strength: float = 0.5) -> str:
        """Regenerate the whole image with SDXL, using the upload as img2img source"""
        output = await self.run(
            self.recolor_model,
            {
                "image": image_url,
                "prompt": prompt,
                "negative_prompt": NEGATIVE_PROMPT,
                "prompt_strength": prompt_strength,
                "num_outputs": 1,
                "scheduler": "K_EULER",
                "num_inference_steps": 50,
                "guidance_scale": 7.5,
                "seed": random.randint(0, 999999),
            },
        )
        return extract_result_url(output)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    async def check_connection(self) -> Dict[str, Any]:
        """List models to verify the token without running anything"""
        if not self.api_token:
            raise ProviderError(
                "Replicate API token not configured",
                error="REPLICATE_API_TOKEN environment variable is missing",
            )

        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._http_transport) as client:
                response = await client.get(f"{self.api_base}/models", headers=self._headers())
        except httpx.HTTPError as e:
            raise ProviderError("Replicate API test failed", error=str(e)) from e

        if response.status_code >= 400:
            raise ProviderError(
                "Replicate API test failed",
                status=response.status_code,
                error=f"API test failed: {response.status_code} {response.reason_phrase}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Replicate API test failed", status=response.status_code, error=str(e)) from e

        return {
            "message": "Replicate API is working",
            "modelsCount": len(data.get("results") or []),
            "tokenConfigured": True,
        }

    async def check_model(self, owner: str, name: str) -> Dict[str, Any]:
        """Report whether a model is visible to this token"""
        model_name = f"{owner}/{name}"
        try:
            async with httpx.AsyncClient(timeout=30.0, transport=self._http_transport) as client:
                response = await client.get(f"{self.api_base}/models/{model_name}", headers=self._headers())
        except httpx.HTTPError as e:
            raise ProviderError("Failed to check model availability", error=str(e)) from e

        if response.status_code >= 400:
            return {
                "available": False,
                "model": model_name,
                "status": response.status_code,
                "statusText": response.reason_phrase,
            }

        try:
            model_data = response.json()
        except ValueError as e:
            raise ProviderError("Failed to check model availability", status=response.status_code, error=str(e)) from e

        return {
            "available": True,
            "model": model_data.get("name"),
            "description": model_data.get("description"),
            "visibility": model_data.get("visibility"),
        }
