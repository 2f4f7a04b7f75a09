"""Registry administration schemas."""

from pydantic import BaseModel, Field


class SuspiciousIpRequest(BaseModel):
    """IP address to add to the suspicious-IP registry."""

    ip: str = Field(..., description="Dotted-quad IPv4 address")


class SuspiciousIpResponse(BaseModel):
    id: int
    ip: str


class StolenCardRequest(BaseModel):
    """Card number to add to the stolen-card registry."""

    number: str = Field(..., description="16-digit card number with a valid checksum")


class StolenCardResponse(BaseModel):
    id: int
    number: str


class StatusResponse(BaseModel):
    """Outcome message for a registry removal."""

    status: str
