# neighbourly/core/security.py
from dataclasses import dataclass
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt
from neighbourly.core.config import settings, primary_domains_list
from neighbourly.models.claim import MAX_CLAIMER_LENGTH
from neighbourly.services.claim_policy import is_organization_identity

ALGO = "HS256"
ACCESS_TTL = 15 * 60
bearer = HTTPBearer(auto_error=False)

@dataclass(frozen=True)
class Caller:
    identity: str
    is_admin: bool

def make_token(identity: str, ttl: int = ACCESS_TTL) -> str:
    now = int(time.time())
    payload = {"sub": identity, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def _decode_token(creds: Optional[HTTPAuthorizationCredentials]) -> dict:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def get_current_caller(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Caller:
    payload = _decode_token(creds)
    identity = (payload.get("sub") or "").strip()
    if not identity or len(identity) > MAX_CLAIMER_LENGTH:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return Caller(identity=identity, is_admin=is_organization_identity(identity, primary_domains_list()))

def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    return caller
