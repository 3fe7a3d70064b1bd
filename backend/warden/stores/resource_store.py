"""API and identity resource lookups.

API resources are always returned whole: secrets, every scope (with that
scope's user claims) and the resource-level user claims.  A scope-name query
selects *which* resources come back, it never trims their scope lists.
"""

import asyncio
import logging
from typing import Any
from typing import Iterable
from typing import List
from typing import Optional

from sqlalchemy.orm import Query
from sqlalchemy.orm import Session
from sqlalchemy.orm import selectinload

from warden.database import db_session
from warden.mappers.mappers import api_resource_to_model
from warden.mappers.mappers import identity_resource_to_model
from warden.models.models import ApiResource as ApiResourceModel
from warden.models.models import ApiScope as ApiScopeModel
from warden.models.models import IdentityResource as IdentityResourceModel
from warden.schemas.schemas import ApiResource
from warden.schemas.schemas import IdentityResource
from warden.schemas.schemas import Resources

logger = logging.getLogger(__name__)


def _api_resources_query(db: Session) -> Query:
    return db.query(ApiResourceModel).options(
        selectinload(ApiResourceModel.secrets),
        selectinload(ApiResourceModel.scopes).selectinload(ApiScopeModel.user_claims),
        selectinload(ApiResourceModel.user_claims),
    )


def _identity_resources_query(db: Session) -> Query:
    return db.query(IdentityResourceModel).options(selectinload(IdentityResourceModel.user_claims))


class ResourceStore:
    """Read-only access to API and identity resources."""

    def __init__(self, session_factory: Any = None):
        self._session_factory = session_factory

    def find_api_resource(self, name: str) -> Optional[ApiResource]:
        with db_session(self._session_factory) as db:
            row = _api_resources_query(db).filter(ApiResourceModel.name == name).first()
            model = api_resource_to_model(row)

        if model is not None:
            logger.debug("Found %s API resource in database", name)
        else:
            logger.debug("Did not find %s API resource in database", name)
        return model

    def find_api_resources_by_scope(self, scope_names: Iterable[str]) -> List[ApiResource]:
        """Return every API resource owning at least one scope in *scope_names*."""

        names = list(dict.fromkeys(scope_names))
        if not names:
            return []

        with db_session(self._session_factory) as db:
            rows = (
                _api_resources_query(db)
                .filter(ApiResourceModel.scopes.any(ApiScopeModel.name.in_(names)))
                .order_by(ApiResourceModel.id)
                .all()
            )
            models = [api_resource_to_model(row) for row in rows]

        logger.debug(
            "Found %s API scopes in database",
            [scope.name for model in models for scope in model.scopes],
        )
        return models

    def find_identity_resources_by_scope(self, scope_names: Iterable[str]) -> List[IdentityResource]:
        """Return identity resources whose name is in *scope_names*."""

        names = list(dict.fromkeys(scope_names))
        if not names:
            return []

        with db_session(self._session_factory) as db:
            rows = (
                _identity_resources_query(db)
                .filter(IdentityResourceModel.name.in_(names))
                .order_by(IdentityResourceModel.id)
                .all()
            )
            models = [identity_resource_to_model(row) for row in rows]

        logger.debug("Found %s identity scopes in database", [model.name for model in models])
        return models

    def get_all_resources(self) -> Resources:
        with db_session(self._session_factory) as db:
            identity = [
                identity_resource_to_model(row)
                for row in _identity_resources_query(db).order_by(IdentityResourceModel.id).all()
            ]
            apis = [api_resource_to_model(row) for row in _api_resources_query(db).order_by(ApiResourceModel.id).all()]

        result = Resources.combine(identity, apis)
        logger.debug("Found %s as all scopes in database", sorted(result.scope_names()))
        return result

    # ------------------------------------------------------------------
    # Async surface
    # ------------------------------------------------------------------

    async def async_find_api_resource(self, name: str) -> Optional[ApiResource]:
        return await asyncio.to_thread(self.find_api_resource, name)

    async def async_find_api_resources_by_scope(self, scope_names: Iterable[str]) -> List[ApiResource]:
        # Materialise the names before handing them to the worker thread.
        return await asyncio.to_thread(self.find_api_resources_by_scope, list(scope_names))

    async def async_find_identity_resources_by_scope(self, scope_names: Iterable[str]) -> List[IdentityResource]:
        return await asyncio.to_thread(self.find_identity_resources_by_scope, list(scope_names))

    async def async_get_all_resources(self) -> Resources:
        return await asyncio.to_thread(self.get_all_resources)


__all__ = ["ResourceStore"]
