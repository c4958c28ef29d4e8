"""
Claim service: claim, unclaim, admin-unclaim and data-entry-unclaim on top of
the claim store, with the rules from claim_policy.

Contention outcomes (already claimed, nothing to release, bad token) are
returned as enum values. Store failures propagate as StoreUnavailable.
"""
import logging
from enum import Enum as PyEnum
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from neighbourly.core.config import primary_domains_list, settings
from neighbourly.models.claim import Claim
from neighbourly.services import claim_policy
from neighbourly.services.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class ClaimOutcome(PyEnum):
    created = "created"
    already_claimed = "already_claimed"


class ReleaseOutcome(PyEnum):
    released = "released"
    not_found = "not_found"
    unauthorized = "unauthorized"


class ClaimService:
    def __init__(self, db: Session, domains: Optional[Iterable[str]] = None):
        self.db = db
        self.store = ClaimStore(db)
        self.domains = list(domains) if domains is not None else primary_domains_list()

    def is_organization(self, identity: Optional[str]) -> bool:
        return claim_policy.is_organization_identity(identity, self.domains)

    def claim(self, slug: str, claimer: str) -> ClaimOutcome:
        # no pre-check: the partial unique index decides who wins
        created = self.store.insert_active(slug, claimer)
        if created is None:
            logger.info("claim on %s by %s refused: already claimed", slug, claimer)
            return ClaimOutcome.already_claimed
        logger.info("mesh block %s claimed by %s", slug, claimer)
        return ClaimOutcome.created

    def unclaim(self, slug: str, claimer: str) -> ReleaseOutcome:
        """Release `slug` only if `claimer` holds it.

        Someone else's claim and no claim at all both read as not_found.
        """
        if self.store.soft_delete(slug, claimer=claimer):
            logger.info("mesh block %s released by %s", slug, claimer)
            return ReleaseOutcome.released
        return ReleaseOutcome.not_found

    def _release_if(self, slug: str, allowed: Callable[[str], bool], actor: str) -> ReleaseOutcome:
        """
        Lock the active row for `slug`, ask `allowed(claimer)`, then release
        that same row only if it is still active.
        """
        current = self.store.active_for_slug(slug, lock=True)
        if current is None or not allowed(current.claimer):
            self.db.rollback()
            return ReleaseOutcome.not_found
        if self.store.soft_delete_by_id(current.id):
            logger.info("mesh block %s (held by %s) released by %s", slug, current.claimer, actor)
            return ReleaseOutcome.released
        return ReleaseOutcome.not_found

    def admin_unclaim(self, slug: str) -> ReleaseOutcome:
        """
        Release `slug` only when its claimer is an organization identity.

        Ordinary volunteers' claims are left alone even on this path.
        """
        return self._release_if(slug, lambda claimer: claim_policy.may_admin_unclaim(claimer, self.domains), "admin")

    def unclaim_as(self, slug: str, requester: str) -> ReleaseOutcome:
        """Release `slug` on behalf of a caller, as far as may_unclaim allows.

        Volunteers release only their own claims; organization callers also
        release organization claims, never a volunteer's.
        """
        return self._release_if(
            slug, lambda claimer: claim_policy.may_unclaim(requester, claimer, self.domains), requester
        )

    def data_entry_unclaim(self, slug: str) -> ReleaseOutcome:
        """Release any active claim on `slug`, whoever holds it."""
        if self.store.soft_delete(slug):
            logger.info("mesh block %s released from data entry", slug)
            return ReleaseOutcome.released
        return ReleaseOutcome.not_found

    def active_claims_for(self, slugs: Iterable[str]) -> dict[str, str]:
        return {c.mesh_block_slug: c.claimer for c in self.store.active_for(slugs)}

    def claims_by(self, claimer: str) -> list[Claim]:
        return self.store.claims_by(claimer)

    def history(self, slug: str) -> list[Claim]:
        return self.store.history(slug)


def unclaim_from_data_entry(
    service: ClaimService,
    slug: str,
    token: Optional[str],
    configured_token: Optional[str] = None,
) -> ReleaseOutcome:
    """Token-gated data_entry_unclaim; a bad token never reaches the store."""
    expected = configured_token if configured_token is not None else settings.data_entry_unclaim_token
    if not claim_policy.may_force_unclaim_any(expected, token):
        logger.warning("data entry unclaim for %s rejected: bad token", slug)
        return ReleaseOutcome.unauthorized
    return service.data_entry_unclaim(slug)
