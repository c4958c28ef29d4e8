"""
Claim store: the claims table and nothing else.

Every "active" lookup filters on deleted_at IS NULL explicitly. Inserting a
second active claim for a slug is refused by the uq_claims_active_slug partial
index; insert_active reports that as None instead of raising. Every other
SQLAlchemy failure, pool checkout timeouts included, becomes StoreUnavailable.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from neighbourly.core.errors import StoreUnavailable
from neighbourly.models.claim import Claim

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ClaimStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, op: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("claim store %s failed: %s", op, e, exc_info=True)
            raise StoreUnavailable(f"{op} failed") from e

    def _active(self):
        return self.db.query(Claim).filter(Claim.deleted_at.is_(None))

    def active_for(self, slugs: Iterable[str]) -> list[Claim]:
        """Active claims for all given slugs in one query."""
        wanted = sorted({str(s) for s in slugs})
        if not wanted:
            return []
        with self._guard("active_for"):
            return self._active().filter(Claim.mesh_block_slug.in_(wanted)).all()

    def active_for_slug(self, slug: str, lock: bool = False) -> Optional[Claim]:
        with self._guard("active_for_slug"):
            q = self._active().filter(Claim.mesh_block_slug == slug)
            if lock:
                q = q.with_for_update()
            return q.first()

    def insert_active(self, slug: str, claimer: str) -> Optional[Claim]:
        """Insert an active claim; None when the slug already has one."""
        claim = Claim(mesh_block_slug=slug, claimer=claimer, claim_date=_now())
        with self._guard("insert_active"):
            self.db.add(claim)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                return None
            self.db.refresh(claim)
        return claim

    def soft_delete(self, slug: str, claimer: Optional[str] = None) -> int:
        """Release the active claim on `slug`, optionally only if held by `claimer`."""
        with self._guard("soft_delete"):
            q = self._active().filter(Claim.mesh_block_slug == slug)
            if claimer is not None:
                q = q.filter(Claim.claimer == claimer)
            updated = q.update({Claim.deleted_at: _now()}, synchronize_session=False)
            self.db.commit()
        return updated

    def soft_delete_by_id(self, claim_id: int) -> int:
        """Release one specific row, only if it is still active."""
        with self._guard("soft_delete_by_id"):
            updated = (
                self._active()
                .filter(Claim.id == claim_id)
                .update({Claim.deleted_at: _now()}, synchronize_session=False)
            )
            self.db.commit()
        return updated

    def claims_by(self, claimer: str) -> list[Claim]:
        with self._guard("claims_by"):
            return (
                self._active()
                .filter(Claim.claimer == claimer)
                .order_by(Claim.claim_date.desc(), Claim.id.desc())
                .all()
            )

    def history(self, slug: str) -> list[Claim]:
        """Every row for a slug, released ones included, newest first."""
        with self._guard("history"):
            return (
                self.db.query(Claim)
                .filter(Claim.mesh_block_slug == slug)
                .order_by(Claim.claim_date.desc(), Claim.id.desc())
                .all()
            )
