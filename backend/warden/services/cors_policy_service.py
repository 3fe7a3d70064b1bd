"""CORS origin allow-list derived from client configuration."""

import asyncio
import logging
from typing import Any
from typing import Optional
from typing import Set

from warden.database import db_session
from warden.models.models import ClientCorsOrigin

logger = logging.getLogger(__name__)


def _normalise(origin: str) -> str:
    # Per-character lowering only; full Unicode folding would let "STRASSE"
    # match a configured "strasse" written with a sharp s.
    return origin.lower()


class CorsPolicyService:
    """Answers whether a browser origin may call the authorization server.

    The allow-list is the union of every client's configured CORS origins.
    It is re-read on each call; there is no cache to invalidate.
    """

    def __init__(self, session_factory: Any = None):
        self._session_factory = session_factory

    def allowed_origins(self) -> Set[str]:
        """Distinct, non-empty origins from all clients, lower-cased."""

        with db_session(self._session_factory) as db:
            rows = db.query(ClientCorsOrigin.origin).all()

        return {_normalise(origin) for (origin,) in rows if origin}

    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        if not origin:
            logger.debug("Origin %r is allowed: %s", origin, False)
            return False

        is_allowed = _normalise(origin) in self.allowed_origins()

        logger.debug("Origin %s is allowed: %s", origin, is_allowed)
        return is_allowed

    async def async_is_origin_allowed(self, origin: Optional[str]) -> bool:
        return await asyncio.to_thread(self.is_origin_allowed, origin)


__all__ = ["CorsPolicyService"]
