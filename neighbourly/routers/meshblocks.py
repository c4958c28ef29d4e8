# File: neighbourly/routers/meshblocks.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.orm import Session
from neighbourly.db.session import get_db
from neighbourly.core.ratelimit import CLAIM_RATE, limiter
from neighbourly.core.security import Caller, get_current_caller
from neighbourly.models.claim import MAX_SLUG_LENGTH
from neighbourly.schemas.claim import ClaimResultOut, DataEntryUnclaimIn, FeatureCollectionIn
from neighbourly.services import geo
from neighbourly.services.claim_service import (
    ClaimOutcome,
    ClaimService,
    ReleaseOutcome,
    unclaim_from_data_entry as gated_data_entry_unclaim,
)
from neighbourly.services.status_overlay import overlay

router = APIRouter(tags=["meshblocks"])
logger = logging.getLogger(__name__)


def _released_or_404(slug: str, outcome: ReleaseOutcome) -> ClaimResultOut:
    if outcome is ReleaseOutcome.released:
        return ClaimResultOut(ok=True, mesh_block_slug=slug, result=outcome.value)
    raise HTTPException(status_code=404, detail="not_found")


# For loading new mesh blocks when the map is scrolled
@router.get("/meshblocks_bounds")
def meshblocks_bounds(
    request: Request,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    data = geo.meshblocks_in_bounds(dict(request.query_params))
    if data.get("features") is None:
        logger.info("404 due to map location returning no meshblocks")
        raise HTTPException(status_code=404, detail="no meshblocks in bounds")
    return overlay(data, caller.identity, ClaimService(db))


@router.post("/meshblocks/overlay")
def overlay_features(
    body: FeatureCollectionIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return overlay(body.model_dump(), caller.identity, ClaimService(db))


@router.get("/pcode_get_bounds")
def pcode_get_bounds(pcode: str = Query(..., min_length=1), _: Caller = Depends(get_current_caller)):
    bounds = geo.postcode_bounds(pcode.strip())
    if not bounds:
        raise HTTPException(status_code=404, detail="postcode not found")
    return bounds


@router.post("/claim_meshblock/{slug}", response_model=ClaimResultOut)
@limiter.limit(CLAIM_RATE)
def claim_meshblock(
    request: Request,
    slug: str = Path(..., min_length=1, max_length=MAX_SLUG_LENGTH),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    outcome = ClaimService(db).claim(slug, caller.identity)
    if outcome is ClaimOutcome.already_claimed:
        raise HTTPException(status_code=409, detail="already_claimed")
    return ClaimResultOut(ok=True, mesh_block_slug=slug, result=outcome.value)


@router.post("/unclaim_meshblock/{slug}", response_model=ClaimResultOut)
@limiter.limit(CLAIM_RATE)
def unclaim_meshblock(
    request: Request,
    slug: str = Path(..., min_length=1, max_length=MAX_SLUG_LENGTH),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return _released_or_404(slug, ClaimService(db).unclaim_as(slug, caller.identity))


@router.post("/unclaim_from_data_entry", response_model=ClaimResultOut)
def unclaim_from_data_entry(body: DataEntryUnclaimIn, db: Session = Depends(get_db)):
    slug = str(body.id)
    outcome = gated_data_entry_unclaim(ClaimService(db), slug, body.token)
    if outcome is ReleaseOutcome.unauthorized:
        raise HTTPException(status_code=401, detail="unauthorized")
    return _released_or_404(slug, outcome)
