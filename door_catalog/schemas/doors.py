# COMPONENT: API SCHEMAS AND DATA MODELS
# REQUIREMENTS SATISFIED: OpenAPI request/response schemas for the door endpoints
"""
door_catalog/schemas/doors.py

Defines Pydantic models used by the door catalog API.

Door records have an open schema: unknown fields are stored and returned
as-is, so the Door models allow extra fields. Create and update bodies
are accepted as raw JSON and validated by services/validation.py, which
reports missing fields the way clients expect (400 with a field list)
instead of Pydantic's 422 shape. These models mainly document and shape
responses.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class Dimensions(BaseModel):
    model_config = ConfigDict(extra="allow")

    height: Number = Field(..., examples=[80])
    width: Number = Field(..., examples=[36])


class Door(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., examples=["0f8fad5b-d9cb-469f-a165-70867728950e-1a2b3c4d"])
    name: str = Field(..., examples=["Front Door"])
    material: str = Field(..., examples=["Wood"])
    dimensions: Dimensions
    finish: Optional[str] = Field(None, examples=["Varnish"])
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class BulkUpdateRequest(BaseModel):
    criteria: Optional[Dict[str, Any]] = Field(None, examples=[{"material": "Wood"}])
    updateData: Optional[Dict[str, Any]] = Field(None, examples=[{"finish": "Gloss"}])


class GroupUpdateResult(BaseModel):
    groupingKey: Any
    totalUpdated: int
    modifiedCount: int
    message: str


class PropagationResponse(BaseModel):
    message: str
    door: Door
    updatedFields: List[str]
    bulkUpdateResult: GroupUpdateResult


class BulkUpdateResponse(BaseModel):
    message: str
    matchedCount: int
    modifiedCount: int
    criteria: Dict[str, Any]
    updatedFields: List[str]


class MessageOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    status: str
    uptime: float
    timestamp: str
    database: str


# Required in some Pydantic v2 setups when using __future__.annotations.
Dimensions.model_rebuild()
Door.model_rebuild()
BulkUpdateRequest.model_rebuild()
GroupUpdateResult.model_rebuild()
PropagationResponse.model_rebuild()
BulkUpdateResponse.model_rebuild()
MessageOut.model_rebuild()
HealthOut.model_rebuild()
