"""API routes for the stolen-card and suspicious-IP registries."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.core.database import get_session
from antifraud.core.dependencies import RequireSupport
from antifraud.schemas.registry import (
    StatusResponse,
    StolenCardRequest,
    StolenCardResponse,
    SuspiciousIpRequest,
    SuspiciousIpResponse,
)
from antifraud.services.registry_service import RegistryService

router = APIRouter(prefix="/antifraud", tags=["registry"])


def get_registry_service(session: AsyncSession = Depends(get_session)) -> RegistryService:
    """Get registry service instance."""
    return RegistryService(session)


@router.post("/suspicious-ip", response_model=SuspiciousIpResponse)
async def add_suspicious_ip(
    request: SuspiciousIpRequest,
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> dict:
    """Add an IP address to the suspicious-IP registry."""
    return await registry_service.add_suspicious_ip(request.ip)


@router.get("/suspicious-ip", response_model=list[SuspiciousIpResponse])
async def list_suspicious_ips(
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> list[dict]:
    return await registry_service.list_suspicious_ips()


@router.delete("/suspicious-ip/{ip}", response_model=StatusResponse)
async def remove_suspicious_ip(
    ip: str,
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> dict:
    return await registry_service.remove_suspicious_ip(ip)


@router.post("/stolencard", response_model=StolenCardResponse)
async def add_stolen_card(
    request: StolenCardRequest,
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> dict:
    """Add a card number to the stolen-card registry."""
    return await registry_service.add_stolen_card(request.number)


@router.get("/stolencard", response_model=list[StolenCardResponse])
async def list_stolen_cards(
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> list[dict]:
    return await registry_service.list_stolen_cards()


@router.delete("/stolencard/{number}", response_model=StatusResponse)
async def remove_stolen_card(
    number: str,
    current_user: RequireSupport,
    registry_service: RegistryService = Depends(get_registry_service),
) -> dict:
    return await registry_service.remove_stolen_card(number)
