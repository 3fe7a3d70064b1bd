"""Conversion between ORM rows and the pydantic domain models.

Every ``*_to_model`` helper accepts ``None`` and returns ``None`` so stores can
map the result of ``query.first()`` without a branch.  ``*_to_entity`` helpers
build brand-new rows (owned collections included) and are only used for
inserts; an existing grant row is refreshed through
:func:`update_persisted_grant_entity` instead.

No field validation happens here – values pass through untouched apart from
timestamps, which are normalised to naive UTC for the ``DateTime`` columns.
"""

from typing import Optional

from warden.models import models
from warden.schemas import schemas
from warden.utils.time import as_naive_utc

# ---------------------------------------------------------------------------
# Secrets / claims
# ---------------------------------------------------------------------------


def _secret_to_model(row) -> schemas.Secret:
    return schemas.Secret(
        value=row.value,
        type=row.type,
        description=row.description,
        expiration=row.expiration,
    )


def _secret_kwargs(secret: schemas.Secret) -> dict:
    return {
        "value": secret.value,
        "type": secret.type,
        "description": secret.description,
        "expiration": as_naive_utc(secret.expiration),
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

_CLIENT_SCALARS = (
    "client_id",
    "client_name",
    "description",
    "enabled",
    "protocol_type",
    "require_client_secret",
    "require_consent",
    "require_pkce",
    "allow_offline_access",
    "identity_token_lifetime",
    "access_token_lifetime",
    "authorization_code_lifetime",
    "absolute_refresh_token_lifetime",
    "sliding_refresh_token_lifetime",
)


def client_to_model(entity: Optional[models.Client]) -> Optional[schemas.Client]:
    if entity is None:
        return None

    return schemas.Client(
        **{name: getattr(entity, name) for name in _CLIENT_SCALARS},
        allowed_grant_types=[row.grant_type for row in entity.allowed_grant_types],
        redirect_uris=[row.redirect_uri for row in entity.redirect_uris],
        post_logout_redirect_uris=[row.post_logout_redirect_uri for row in entity.post_logout_redirect_uris],
        allowed_scopes=[row.scope for row in entity.allowed_scopes],
        client_secrets=[_secret_to_model(row) for row in entity.client_secrets],
        claims=[schemas.ClientClaim(type=row.type, value=row.value) for row in entity.claims],
        identity_provider_restrictions=[row.provider for row in entity.identity_provider_restrictions],
        allowed_cors_origins=[row.origin for row in entity.allowed_cors_origins],
    )


def client_to_entity(model: schemas.Client) -> models.Client:
    entity = models.Client(**{name: getattr(model, name) for name in _CLIENT_SCALARS})

    entity.allowed_grant_types = [models.ClientGrantType(grant_type=value) for value in model.allowed_grant_types]
    entity.redirect_uris = [models.ClientRedirectUri(redirect_uri=value) for value in model.redirect_uris]
    entity.post_logout_redirect_uris = [
        models.ClientPostLogoutRedirectUri(post_logout_redirect_uri=value) for value in model.post_logout_redirect_uris
    ]
    entity.allowed_scopes = [models.ClientScope(scope=value) for value in model.allowed_scopes]
    entity.client_secrets = [models.ClientSecret(**_secret_kwargs(secret)) for secret in model.client_secrets]
    entity.claims = [models.ClientClaim(type=claim.type, value=claim.value) for claim in model.claims]
    entity.identity_provider_restrictions = [
        models.ClientIdPRestriction(provider=value) for value in model.identity_provider_restrictions
    ]
    entity.allowed_cors_origins = [models.ClientCorsOrigin(origin=value) for value in model.allowed_cors_origins]
    return entity


# ---------------------------------------------------------------------------
# API resources
# ---------------------------------------------------------------------------


def _scope_to_model(row: models.ApiScope) -> schemas.Scope:
    return schemas.Scope(
        name=row.name,
        display_name=row.display_name,
        description=row.description,
        required=row.required,
        emphasize=row.emphasize,
        show_in_discovery_document=row.show_in_discovery_document,
        user_claims=[claim.type for claim in row.user_claims],
    )


def _scope_to_entity(scope: schemas.Scope) -> models.ApiScope:
    return models.ApiScope(
        name=scope.name,
        display_name=scope.display_name,
        description=scope.description,
        required=scope.required,
        emphasize=scope.emphasize,
        show_in_discovery_document=scope.show_in_discovery_document,
        user_claims=[models.ApiScopeClaim(type=claim) for claim in scope.user_claims],
    )


def api_resource_to_model(entity: Optional[models.ApiResource]) -> Optional[schemas.ApiResource]:
    if entity is None:
        return None

    return schemas.ApiResource(
        name=entity.name,
        display_name=entity.display_name,
        description=entity.description,
        enabled=entity.enabled,
        api_secrets=[_secret_to_model(row) for row in entity.secrets],
        scopes=[_scope_to_model(row) for row in entity.scopes],
        user_claims=[row.type for row in entity.user_claims],
    )


def api_resource_to_entity(model: schemas.ApiResource) -> models.ApiResource:
    return models.ApiResource(
        name=model.name,
        display_name=model.display_name,
        description=model.description,
        enabled=model.enabled,
        secrets=[models.ApiSecret(**_secret_kwargs(secret)) for secret in model.api_secrets],
        scopes=[_scope_to_entity(scope) for scope in model.scopes],
        user_claims=[models.ApiResourceClaim(type=claim) for claim in model.user_claims],
    )


# ---------------------------------------------------------------------------
# Identity resources
# ---------------------------------------------------------------------------


def identity_resource_to_model(entity: Optional[models.IdentityResource]) -> Optional[schemas.IdentityResource]:
    if entity is None:
        return None

    return schemas.IdentityResource(
        name=entity.name,
        display_name=entity.display_name,
        description=entity.description,
        enabled=entity.enabled,
        required=entity.required,
        emphasize=entity.emphasize,
        show_in_discovery_document=entity.show_in_discovery_document,
        user_claims=[row.type for row in entity.user_claims],
    )


def identity_resource_to_entity(model: schemas.IdentityResource) -> models.IdentityResource:
    return models.IdentityResource(
        name=model.name,
        display_name=model.display_name,
        description=model.description,
        enabled=model.enabled,
        required=model.required,
        emphasize=model.emphasize,
        show_in_discovery_document=model.show_in_discovery_document,
        user_claims=[models.IdentityClaim(type=claim) for claim in model.user_claims],
    )


# ---------------------------------------------------------------------------
# Persisted grants
# ---------------------------------------------------------------------------


def persisted_grant_to_model(entity: Optional[models.PersistedGrant]) -> Optional[schemas.PersistedGrant]:
    if entity is None:
        return None

    return schemas.PersistedGrant(
        key=entity.key,
        type=entity.type,
        subject_id=entity.subject_id,
        client_id=entity.client_id,
        creation_time=entity.creation_time,
        expiration=entity.expiration,
        data=entity.data,
    )


def persisted_grant_to_entity(model: schemas.PersistedGrant) -> models.PersistedGrant:
    return models.PersistedGrant(
        key=model.key,
        type=model.type,
        subject_id=model.subject_id,
        client_id=model.client_id,
        creation_time=as_naive_utc(model.creation_time),
        expiration=as_naive_utc(model.expiration),
        data=model.data,
    )


def update_persisted_grant_entity(model: schemas.PersistedGrant, entity: models.PersistedGrant) -> list[str]:
    """Copy the mutable fields of *model* onto the tracked *entity*.

    ``key`` is the identity of the row and is never touched.  Attributes are
    only assigned when the value differs, so the session's dirty set (and the
    UPDATE statement) covers exactly what changed.  Returns the changed
    attribute names.
    """

    incoming = {
        "type": model.type,
        "subject_id": model.subject_id,
        "client_id": model.client_id,
        "creation_time": as_naive_utc(model.creation_time),
        "expiration": as_naive_utc(model.expiration),
        "data": model.data,
    }

    changed = []
    for name, value in incoming.items():
        if getattr(entity, name) != value:
            setattr(entity, name, value)
            changed.append(name)
    return changed
