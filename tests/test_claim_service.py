"""
Claim service against a real SQLite claim store.

Covers the claim lifecycle: first claimer wins, releases only by the holder,
the narrow admin path, the token-gated data-entry path and history retention.
"""
import threading

import pytest
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeout

from neighbourly.core.errors import StoreUnavailable
from neighbourly.models.claim import Claim
from neighbourly.services.claim_service import (
    ClaimOutcome,
    ClaimService,
    ReleaseOutcome,
    unclaim_from_data_entry,
)
from tests.conftest import DOMAINS, ORGANIZER, OTHER_VOLUNTEER, VOLUNTEER

SLUG = "mb-20660910000"
TOKEN = "s3cret-token"


def test_claim_creates_active_claim(service):
    assert service.claim(SLUG, VOLUNTEER) is ClaimOutcome.created
    assert service.active_claims_for([SLUG]) == {SLUG: VOLUNTEER}


def test_second_claimer_gets_conflict_and_first_keeps_claim(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.claim(SLUG, OTHER_VOLUNTEER) is ClaimOutcome.already_claimed
    assert service.active_claims_for([SLUG]) == {SLUG: VOLUNTEER}


def test_same_claimer_claiming_twice_is_a_conflict(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.claim(SLUG, VOLUNTEER) is ClaimOutcome.already_claimed


def test_session_is_usable_after_conflict(service):
    service.claim(SLUG, VOLUNTEER)
    service.claim(SLUG, OTHER_VOLUNTEER)
    assert service.claim("mb-other", OTHER_VOLUNTEER) is ClaimOutcome.created


def test_concurrent_claims_have_exactly_one_winner(session_factory):
    barrier = threading.Barrier(2)
    results = {}

    def attempt(claimer):
        session = session_factory()
        try:
            barrier.wait()
            results[claimer] = ClaimService(session, domains=DOMAINS).claim(SLUG, claimer)
        finally:
            session.close()

    threads = [threading.Thread(target=attempt, args=(c,)) for c in (VOLUNTEER, OTHER_VOLUNTEER)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(r.value for r in results.values()) == ["already_claimed", "created"]
    winner = next(c for c, r in results.items() if r is ClaimOutcome.created)
    session = session_factory()
    try:
        assert ClaimService(session, domains=DOMAINS).active_claims_for([SLUG]) == {SLUG: winner}
    finally:
        session.close()


def test_unclaim_by_holder_releases(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.unclaim(SLUG, VOLUNTEER) is ReleaseOutcome.released
    assert service.active_claims_for([SLUG]) == {}


def test_unclaim_by_someone_else_is_not_found_and_keeps_claim(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.unclaim(SLUG, OTHER_VOLUNTEER) is ReleaseOutcome.not_found
    assert service.active_claims_for([SLUG]) == {SLUG: VOLUNTEER}


def test_unclaim_without_claim_is_not_found(service):
    assert service.unclaim(SLUG, VOLUNTEER) is ReleaseOutcome.not_found


def test_released_claim_does_not_block_next_claimer(service):
    service.claim(SLUG, VOLUNTEER)
    service.unclaim(SLUG, VOLUNTEER)
    assert service.claim(SLUG, OTHER_VOLUNTEER) is ClaimOutcome.created
    assert service.active_claims_for([SLUG]) == {SLUG: OTHER_VOLUNTEER}


def test_release_is_soft_delete(service, db):
    service.claim(SLUG, VOLUNTEER)
    service.unclaim(SLUG, VOLUNTEER)
    rows = db.query(Claim).filter(Claim.mesh_block_slug == SLUG).all()
    assert len(rows) == 1
    assert rows[0].deleted_at is not None
    assert not rows[0].is_active


def test_admin_unclaim_releases_organization_claim(service):
    service.claim(SLUG, ORGANIZER)
    assert service.admin_unclaim(SLUG) is ReleaseOutcome.released
    assert service.active_claims_for([SLUG]) == {}


def test_admin_unclaim_leaves_volunteer_claim_alone(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.admin_unclaim(SLUG) is ReleaseOutcome.not_found
    assert service.active_claims_for([SLUG]) == {SLUG: VOLUNTEER}


def test_admin_unclaim_without_claim_is_not_found(service):
    assert service.admin_unclaim(SLUG) is ReleaseOutcome.not_found


def test_unclaim_as_routes_organization_callers_through_admin_path(service):
    service.claim(SLUG, ORGANIZER)
    service.claim("mb-volunteer", VOLUNTEER)
    assert service.unclaim_as(SLUG, "someone@orgdomain.com") is ReleaseOutcome.released
    assert service.unclaim_as("mb-volunteer", "someone@orgdomain.com") is ReleaseOutcome.not_found
    assert service.unclaim_as("mb-volunteer", VOLUNTEER) is ReleaseOutcome.released


def test_data_entry_unclaim_releases_any_claim(service):
    service.claim(SLUG, VOLUNTEER)
    assert service.data_entry_unclaim(SLUG) is ReleaseOutcome.released
    assert service.data_entry_unclaim(SLUG) is ReleaseOutcome.not_found


def test_data_entry_unclaim_with_token(service):
    service.claim(SLUG, VOLUNTEER)
    assert unclaim_from_data_entry(service, SLUG, TOKEN, configured_token=TOKEN) is ReleaseOutcome.released


@pytest.mark.parametrize(
    "configured,supplied",
    [
        (TOKEN, "wrong-token"),
        (TOKEN, ""),
        ("short", "short"),
        ("", ""),
    ],
)
def test_data_entry_unclaim_rejects_bad_token(service, configured, supplied):
    service.claim(SLUG, VOLUNTEER)
    assert unclaim_from_data_entry(service, SLUG, supplied, configured_token=configured) is ReleaseOutcome.unauthorized
    assert service.active_claims_for([SLUG]) == {SLUG: VOLUNTEER}


def test_active_claims_for_is_bulk_and_skips_released(service):
    service.claim("a", VOLUNTEER)
    service.claim("b", OTHER_VOLUNTEER)
    service.claim("c", VOLUNTEER)
    service.unclaim("c", VOLUNTEER)
    assert service.active_claims_for(["a", "b", "c", "d"]) == {"a": VOLUNTEER, "b": OTHER_VOLUNTEER}
    assert service.active_claims_for([]) == {}


def test_history_keeps_released_rows(service):
    service.claim(SLUG, VOLUNTEER)
    service.unclaim(SLUG, VOLUNTEER)
    service.claim(SLUG, OTHER_VOLUNTEER)
    history = service.history(SLUG)
    assert [c.claimer for c in history] == [OTHER_VOLUNTEER, VOLUNTEER]
    assert history[0].deleted_at is None
    assert history[1].deleted_at is not None


def test_claims_by_lists_only_active_claims_of_claimer(service):
    service.claim("a", VOLUNTEER)
    service.claim("b", VOLUNTEER)
    service.claim("c", OTHER_VOLUNTEER)
    service.unclaim("b", VOLUNTEER)
    assert [c.mesh_block_slug for c in service.claims_by(VOLUNTEER)] == ["a"]


def test_store_failure_propagates_as_store_unavailable(service, db, monkeypatch):
    def boom():
        raise OperationalError("INSERT INTO claims", {}, Exception("connection refused"))

    monkeypatch.setattr(db, "commit", boom)
    with pytest.raises(StoreUnavailable):
        service.claim(SLUG, VOLUNTEER)


def test_pool_timeout_propagates_as_store_unavailable(service, db, monkeypatch):
    def exhausted():
        raise PoolTimeout("QueuePool limit of size 5 overflow 10 reached, connection timed out")

    monkeypatch.setattr(db, "commit", exhausted)
    with pytest.raises(StoreUnavailable):
        service.claim(SLUG, VOLUNTEER)


def test_unclaim_as_decides_with_may_unclaim(service, monkeypatch):
    from neighbourly.services import claim_policy

    seen = []
    real = claim_policy.may_unclaim

    def spy(requester, claimer, domains):
        seen.append((requester, claimer))
        return real(requester, claimer, domains)

    monkeypatch.setattr(claim_policy, "may_unclaim", spy)
    service.claim(SLUG, VOLUNTEER)

    assert service.unclaim_as(SLUG, OTHER_VOLUNTEER) is ReleaseOutcome.not_found
    assert service.unclaim_as(SLUG, VOLUNTEER) is ReleaseOutcome.released
    assert seen == [(OTHER_VOLUNTEER, VOLUNTEER), (VOLUNTEER, VOLUNTEER)]


def test_organization_caller_releases_own_organization_claim(service):
    service.claim(SLUG, ORGANIZER)
    assert service.unclaim_as(SLUG, ORGANIZER) is ReleaseOutcome.released
    assert service.active_claims_for([SLUG]) == {}
