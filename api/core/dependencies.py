"""
FastAPI dependencies for the per-process services built at start-up
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from services.ledger_service import ProjectLedger
from services.recolor_service import RecolorOrchestrator
from services.replicate_service import ReplicateGateway
from services.storage_service import UploadStore


def get_ledger(db: AsyncSession = Depends(get_db)) -> ProjectLedger:
    return ProjectLedger(db)


def get_orchestrator(request: Request) -> RecolorOrchestrator:
    return request.app.state.orchestrator


def get_gateway(request: Request) -> ReplicateGateway:
    return request.app.state.orchestrator.gateway


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store
