from pydantic import BaseModel, Field
from typing import Any, Optional, Union
from datetime import datetime


class ClaimOut(BaseModel):
    mesh_block_slug: str
    claimer: str
    claim_date: datetime
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClaimResultOut(BaseModel):
    ok: bool
    mesh_block_slug: str
    result: str


class DataEntryUnclaimIn(BaseModel):
    id: Union[str, int]
    token: Optional[str] = None


class FeatureCollectionIn(BaseModel):
    """GeoJSON-like collection; only features[].properties.slug is read."""
    type: str = "FeatureCollection"
    features: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        extra = "allow"


class CallerOut(BaseModel):
    identity: str
    is_admin: bool
