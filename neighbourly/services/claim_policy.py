"""
Who may hold, release or clear a claim on a mesh block.

Pure decisions only: no database, no settings lookups. Callers pass in the
configured organization domains so the same inputs always give the same answer.
"""
from __future__ import annotations

import hmac
from enum import Enum as PyEnum
from typing import Iterable, Optional

MIN_TOKEN_LENGTH = 6


class ClaimStatus(PyEnum):
    unclaimed = "unclaimed"
    claimed_by_you = "claimed_by_you"
    claimed = "claimed"
    quarantine = "quarantine"


def is_organization_identity(identity: Optional[str], domains: Iterable[str]) -> bool:
    """
    True when the identity contains any configured organization domain.

    Case-sensitive substring containment: "a@orgdomain.com" matches
    "orgdomain.com". Blank domains are ignored so an empty configuration
    never matches anyone.
    """
    if not identity:
        return False
    return any(domain and domain in identity for domain in domains)


def classify(claimer: Optional[str], caller: Optional[str], claimer_is_organization: bool) -> ClaimStatus:
    """Status of one area as seen by `caller`.

    Organization claims are quarantine for everyone, including the
    organization identity that holds them.
    """
    if claimer is None:
        return ClaimStatus.unclaimed
    if claimer_is_organization:
        return ClaimStatus.quarantine
    if caller is not None and claimer == caller:
        return ClaimStatus.claimed_by_you
    return ClaimStatus.claimed


def may_unclaim(requester: str, claimer: str, domains: Iterable[str]) -> bool:
    """
    Ordinary callers release only their own claims (exact match).
    Organization callers may also release any claim held by an organization
    identity, but never an ordinary volunteer's claim.
    """
    domains = list(domains)
    if requester == claimer:
        return True
    return is_organization_identity(requester, domains) and is_organization_identity(claimer, domains)


def may_admin_unclaim(claimer: str, domains: Iterable[str]) -> bool:
    return is_organization_identity(claimer, domains)


def may_force_unclaim_any(configured_token: Optional[str], supplied_token: Optional[str]) -> bool:
    """Shared-secret gate for the data-entry path.

    A missing or too-short configured token keeps the path closed.
    """
    if not configured_token or len(configured_token) < MIN_TOKEN_LENGTH:
        return False
    if not supplied_token:
        return False
    return hmac.compare_digest(configured_token.encode(), supplied_token.encode())
