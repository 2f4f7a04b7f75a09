"""Stolen-card and suspicious-IP registry administration."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from antifraud.core.errors import ConflictError, NotFoundError, ValidationError
from antifraud.core.security.card_numbers import is_valid_card_number, mask_card_number
from antifraud.engine.validator import is_valid_ip
from antifraud.persistence.registry_repository import RegistryKind, RegistryRepository

logger = logging.getLogger(__name__)


class RegistryService:
    """Service for maintaining the two blocklists."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.stolen_cards = RegistryRepository(session, RegistryKind.STOLEN_CARD)
        self.suspicious_ips = RegistryRepository(session, RegistryKind.SUSPICIOUS_IP)

    async def add_suspicious_ip(self, ip: str) -> dict:
        self._require_ip(ip)
        entry = await self.suspicious_ips.add(ip)
        if entry is None:
            raise ConflictError("IP is already registered", details={"ip": ip})
        return entry

    async def list_suspicious_ips(self) -> list[dict]:
        return await self.suspicious_ips.list_all()

    async def remove_suspicious_ip(self, ip: str) -> dict:
        self._require_ip(ip)
        if not await self.suspicious_ips.delete(ip):
            raise NotFoundError("IP is not registered", details={"ip": ip})
        logger.info("Suspicious IP removed", extra={"ip": ip})
        return {"status": f"IP {ip} successfully removed!"}

    async def add_stolen_card(self, number: str) -> dict:
        self._require_number(number)
        entry = await self.stolen_cards.add(number)
        if entry is None:
            raise ConflictError(
                "Card is already registered",
                details={"number": mask_card_number(number)},
            )
        return entry

    async def list_stolen_cards(self) -> list[dict]:
        return await self.stolen_cards.list_all()

    async def remove_stolen_card(self, number: str) -> dict:
        self._require_number(number)
        if not await self.stolen_cards.delete(number):
            raise NotFoundError(
                "Card is not registered",
                details={"number": mask_card_number(number)},
            )
        logger.info("Stolen card removed", extra={"card": mask_card_number(number)})
        return {"status": f"Card {number} successfully removed!"}

    def _require_ip(self, ip: str) -> None:
        if not is_valid_ip(ip):
            raise ValidationError("IP must be a dotted-quad IPv4 address", details={"field": "ip"})

    def _require_number(self, number: str) -> None:
        if not is_valid_card_number(number):
            raise ValidationError(
                "Card number must be 16 digits with a valid checksum",
                details={"field": "number"},
            )
