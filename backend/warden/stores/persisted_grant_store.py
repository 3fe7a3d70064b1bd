"""Lifecycle of persisted grants (codes, refresh tokens, consents, ...).

Writes go through the ORM unit of work: the row is loaded, inserted or
mutated in place, then committed.  No application-level lock is taken; the
``version`` column on :class:`warden.models.models.PersistedGrant` makes the
database reject a write based on a stale read, which surfaces here as
:class:`sqlalchemy.orm.exc.StaleDataError`.

What happens to such a lost race depends on the conflict policy:

``ignore`` (default)
    roll back, log, and report :attr:`StoreResult.CONFLICT_IGNORED`.
``raise``
    raise :class:`warden.exceptions.GrantStoreConflictError`.

Any other storage error propagates unchanged.
"""

import asyncio
import logging
from typing import Any
from typing import List
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from warden.config import CONFLICT_POLICIES
from warden.config import get_settings
from warden.database import db_session
from warden.exceptions import GrantStoreConflictError
from warden.exceptions import UnknownConflictPolicyError
from warden.mappers.mappers import persisted_grant_to_entity
from warden.mappers.mappers import persisted_grant_to_model
from warden.mappers.mappers import update_persisted_grant_entity
from warden.models.enums import StoreResult
from warden.models.models import PersistedGrant as PersistedGrantModel
from warden.schemas.schemas import PersistedGrant

logger = logging.getLogger(__name__)


class PersistedGrantStore:
    """Upsert, lookup and removal of :class:`PersistedGrant` rows."""

    def __init__(self, session_factory: Any = None, conflict_policy: Optional[str] = None):
        self._session_factory = session_factory

        policy = conflict_policy if conflict_policy is not None else get_settings().grant_conflict_policy
        if policy not in CONFLICT_POLICIES:
            raise UnknownConflictPolicyError(policy)
        self._conflict_policy = policy

    @property
    def conflict_policy(self) -> str:
        return self._conflict_policy

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def store(self, grant: PersistedGrant) -> StoreResult:
        """Insert *grant*, or update the row already holding ``grant.key``."""

        conflict = None

        with db_session(self._session_factory) as db:
            existing = db.get(PersistedGrantModel, grant.key)
            if existing is None:
                logger.debug("%s not found in database", grant.key)
                db.add(persisted_grant_to_entity(grant))
            else:
                logger.debug("%s found in database", grant.key)
                changed = update_persisted_grant_entity(grant, existing)
                if not changed:
                    return StoreResult.APPLIED

            try:
                db.commit()
            except StaleDataError as exc:
                db.rollback()
                conflict = exc
            except IntegrityError as exc:
                db.rollback()
                # Another writer inserted the same key between our read and
                # our commit.  Anything else (NOT NULL etc.) is a real error.
                if existing is not None or db.get(PersistedGrantModel, grant.key) is None:
                    raise
                conflict = exc

        if conflict is not None:
            return self._conflict("updating", f"{grant.key} persisted grant", conflict, logging.WARNING)
        return StoreResult.APPLIED

    def remove(self, key: str) -> StoreResult:
        """Delete the grant stored under *key*; a missing key is a no-op."""

        conflict = None

        with db_session(self._session_factory) as db:
            row = db.get(PersistedGrantModel, key)
            if row is None:
                logger.debug("no %s persisted grant found in database", key)
                return StoreResult.NOT_FOUND

            logger.debug("removing %s persisted grant from database", key)
            db.delete(row)

            try:
                db.commit()
            except StaleDataError as exc:
                db.rollback()
                conflict = exc

        if conflict is not None:
            return self._conflict("removing", f"{key} persisted grant", conflict, logging.INFO)
        return StoreResult.APPLIED

    def remove_all(self, subject_id: Optional[str], client_id: str, type: Optional[str] = None) -> StoreResult:
        """Delete every grant for *subject_id* and *client_id*.

        When *type* is given only grants of that type go.  Matching nothing is
        a valid outcome and still reports ``APPLIED``.
        """

        conflict = None
        target = f"subject {subject_id}, clientId {client_id}"
        if type is not None:
            target += f", grantType {type}"

        with db_session(self._session_factory) as db:
            query = db.query(PersistedGrantModel).filter(
                PersistedGrantModel.subject_id == subject_id,
                PersistedGrantModel.client_id == client_id,
            )
            if type is not None:
                query = query.filter(PersistedGrantModel.type == type)

            rows = query.all()
            logger.debug("removing %d persisted grants from database for %s", len(rows), target)

            for row in rows:
                db.delete(row)

            try:
                db.commit()
            except StaleDataError as exc:
                db.rollback()
                conflict = exc

        if conflict is not None:
            return self._conflict("removing", f"persisted grants for {target}", conflict, logging.INFO)
        return StoreResult.APPLIED

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[PersistedGrant]:
        with db_session(self._session_factory) as db:
            model = persisted_grant_to_model(db.get(PersistedGrantModel, key))

        logger.debug("%s found in database: %s", key, model is not None)
        return model

    def get_all(self, subject_id: str) -> List[PersistedGrant]:
        """Return every grant owned by *subject_id* (order unspecified)."""

        with db_session(self._session_factory) as db:
            rows = db.query(PersistedGrantModel).filter(PersistedGrantModel.subject_id == subject_id).all()
            models = [persisted_grant_to_model(row) for row in rows]

        logger.debug("%d persisted grants found for %s", len(models), subject_id)
        return models

    # ------------------------------------------------------------------
    # Async surface
    # ------------------------------------------------------------------

    async def async_store(self, grant: PersistedGrant) -> StoreResult:
        return await asyncio.to_thread(self.store, grant)

    async def async_get(self, key: str) -> Optional[PersistedGrant]:
        return await asyncio.to_thread(self.get, key)

    async def async_get_all(self, subject_id: str) -> List[PersistedGrant]:
        return await asyncio.to_thread(self.get_all, subject_id)

    async def async_remove(self, key: str) -> StoreResult:
        return await asyncio.to_thread(self.remove, key)

    async def async_remove_all(
        self, subject_id: Optional[str], client_id: str, type: Optional[str] = None
    ) -> StoreResult:
        return await asyncio.to_thread(self.remove_all, subject_id, client_id, type)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _conflict(self, action: str, target: str, exc: Exception, level: int) -> StoreResult:
        if self._conflict_policy == "raise":
            raise GrantStoreConflictError(action, target, exc) from exc

        logger.log(level, "exception %s %s in database: %s", action, target, exc)
        return StoreResult.CONFLICT_IGNORED


__all__ = ["PersistedGrantStore"]
