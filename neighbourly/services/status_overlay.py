"""
Status overlay: stamp claim_status onto a GeoJSON-like feature collection.

Reads only. One bulk claim lookup per collection, then claim_policy.classify
per feature. The input collection is not mutated.
"""
import copy
from typing import Any, Optional

from neighbourly.services import claim_policy
from neighbourly.services.claim_service import ClaimService

STATUS_KEY = "claim_status"


def feature_slug(feature: dict) -> Optional[str]:
    slug = (feature.get("properties") or {}).get("slug")
    return None if slug is None else str(slug)


def overlay(collection: dict[str, Any], caller: Optional[str], service: ClaimService) -> dict[str, Any]:
    features = collection.get("features") or []
    slugs = {s for s in (feature_slug(f) for f in features) if s is not None}
    claims = service.active_claims_for(slugs)

    out = copy.deepcopy(collection)
    for feature in out.get("features") or []:
        claimer = claims.get(feature_slug(feature))
        status = claim_policy.classify(claimer, caller, service.is_organization(claimer))
        props = feature.get("properties") or {}
        props[STATUS_KEY] = status.value
        feature["properties"] = props
    return out
