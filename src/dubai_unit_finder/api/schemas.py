from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    portals: List[str] = Field(default_factory=list)


class EndpointAck(BaseModel):
    success: bool = True
    endpoint: str
    url: str


class PropertiesResponse(BaseModel):
    """Extraction result plus the flattened history row when a user id was sent.

    `result` keeps the exact `ListingResult.to_dict()` shape, so failed
    extractions carry only success/source/url/error.
    """

    result: Dict[str, Any]
    history: Optional[Dict[str, Any]] = None


class CombinedResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]] = Field(default_factory=list)
