"""Client lookups for the authorization engine."""

import asyncio
import logging
from typing import Any
from typing import Optional

from sqlalchemy.orm import selectinload

from warden.database import db_session
from warden.mappers.mappers import client_to_model
from warden.models.models import Client as ClientModel
from warden.schemas.schemas import Client

logger = logging.getLogger(__name__)

# Every owned collection is loaded up front so the returned model is complete
# once the session has closed.
_CLIENT_COLLECTIONS = (
    ClientModel.allowed_grant_types,
    ClientModel.redirect_uris,
    ClientModel.post_logout_redirect_uris,
    ClientModel.allowed_scopes,
    ClientModel.client_secrets,
    ClientModel.claims,
    ClientModel.identity_provider_restrictions,
    ClientModel.allowed_cors_origins,
)


class ClientStore:
    """Read-only access to registered clients."""

    def __init__(self, session_factory: Any = None):
        self._session_factory = session_factory

    def find_client_by_id(self, client_id: str) -> Optional[Client]:
        """Return the client whose ``client_id`` matches exactly, or ``None``."""

        with db_session(self._session_factory) as db:
            row = (
                db.query(ClientModel)
                .options(*(selectinload(rel) for rel in _CLIENT_COLLECTIONS))
                .filter(ClientModel.client_id == client_id)
                .first()
            )
            # Backends with a case-insensitive default collation (MySQL) would
            # otherwise let "WEB" find "web".
            if row is not None and row.client_id != client_id:
                row = None
            model = client_to_model(row)

        logger.debug("%s found in database: %s", client_id, model is not None)
        return model

    async def async_find_client_by_id(self, client_id: str) -> Optional[Client]:
        return await asyncio.to_thread(self.find_client_by_id, client_id)


__all__ = ["ClientStore"]
