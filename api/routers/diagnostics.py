"""
Inference provider connectivity probes
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.dependencies import get_gateway
from core.exceptions import ProviderError
from services.replicate_service import ReplicateGateway

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/test-replicate")
async def test_replicate(gateway: ReplicateGateway = Depends(get_gateway)):
    """Verify the Replicate token without running a model"""
    try:
        return await gateway.check_connection()
    except ProviderError as e:
        logger.error(f"Replicate test error: {e.error or e.message}")
        return JSONResponse(
            status_code=500,
            content={
                "message": e.message,
                "error": e.error,
                "tokenConfigured": bool(gateway.api_token),
            },
        )


@router.get("/check-model/{owner}/{name}")
async def check_model(owner: str, name: str, gateway: ReplicateGateway = Depends(get_gateway)):
    """Check whether a specific model is available"""
    return await gateway.check_model(owner, name)
