# File: neighbourly/routers/claims.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from neighbourly.db.session import get_db
from neighbourly.core.security import Caller, get_current_caller, require_admin
from neighbourly.schemas.claim import CallerOut, ClaimOut
from neighbourly.services.claim_service import ClaimService

router = APIRouter(tags=["claims"])

@router.get("/me", response_model=CallerOut)
def me(caller: Caller = Depends(get_current_caller)):
    return CallerOut(identity=caller.identity, is_admin=caller.is_admin)

@router.get("/claims/mine", response_model=list[ClaimOut])
def my_claims(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return ClaimService(db).claims_by(caller.identity)

@router.get("/claims/{slug}/history", response_model=list[ClaimOut])
def claim_history(slug: str, db: Session = Depends(get_db), _: Caller = Depends(require_admin)):
    return ClaimService(db).history(slug)
