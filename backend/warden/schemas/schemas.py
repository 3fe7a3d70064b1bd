from datetime import datetime
from typing import Iterable
from typing import List
from typing import Optional
from typing import Set

from pydantic import BaseModel

from warden.models.enums import ProtocolType
from warden.models.enums import SecretType

# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------


class Secret(BaseModel):
    value: str
    type: Optional[str] = SecretType.SHARED_SECRET.value
    description: Optional[str] = None
    expiration: Optional[datetime] = None


class ClientClaim(BaseModel):
    type: str
    value: str


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class Client(BaseModel):
    """A registered relying-party application.

    Collections are always lists – an unconfigured collection is ``[]``.
    """

    client_id: str
    client_name: Optional[str] = None
    description: Optional[str] = None
    enabled: bool = True
    protocol_type: str = ProtocolType.OIDC.value

    require_client_secret: bool = True
    require_consent: bool = True
    require_pkce: bool = False
    allow_offline_access: bool = False

    identity_token_lifetime: int = 300
    access_token_lifetime: int = 3600
    authorization_code_lifetime: int = 300
    absolute_refresh_token_lifetime: int = 2592000
    sliding_refresh_token_lifetime: int = 1296000

    allowed_grant_types: List[str] = []
    redirect_uris: List[str] = []
    post_logout_redirect_uris: List[str] = []
    allowed_scopes: List[str] = []
    client_secrets: List[Secret] = []
    claims: List[ClientClaim] = []
    identity_provider_restrictions: List[str] = []
    # Legacy rows may hold a NULL origin; it is passed through, not dropped.
    allowed_cors_origins: List[Optional[str]] = []


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class Scope(BaseModel):
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    emphasize: bool = False
    show_in_discovery_document: bool = True
    user_claims: List[str] = []


class ApiResource(BaseModel):
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    enabled: bool = True
    api_secrets: List[Secret] = []
    scopes: List[Scope] = []
    user_claims: List[str] = []


class IdentityResource(BaseModel):
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    enabled: bool = True
    required: bool = False
    emphasize: bool = False
    show_in_discovery_document: bool = True
    user_claims: List[str] = []


class Resources(BaseModel):
    """Read-model bundling every identity and API resource.

    Built per query by :meth:`ResourceStore.get_all_resources`; never stored.
    """

    identity_resources: List[IdentityResource] = []
    api_resources: List[ApiResource] = []

    def find_identity_resource(self, name: str) -> Optional[IdentityResource]:
        return next((r for r in self.identity_resources if r.name == name), None)

    def find_api_resource(self, name: str) -> Optional[ApiResource]:
        return next((r for r in self.api_resources if r.name == name), None)

    def find_api_scope(self, name: str) -> Optional[Scope]:
        """Return the first API scope called *name* across all API resources."""

        for api in self.api_resources:
            for scope in api.scopes:
                if scope.name == name:
                    return scope
        return None

    def scope_names(self) -> Set[str]:
        """Identity resource names plus every API scope name."""

        names = {r.name for r in self.identity_resources}
        names.update(scope.name for api in self.api_resources for scope in api.scopes)
        return names

    @classmethod
    def combine(cls, identity: Iterable[IdentityResource], apis: Iterable[ApiResource]) -> "Resources":
        return cls(identity_resources=list(identity), api_resources=list(apis))


# ---------------------------------------------------------------------------
# Persisted grants
# ---------------------------------------------------------------------------


class PersistedGrant(BaseModel):
    """A server-side security artifact (code, refresh token, consent, ...).

    ``data`` is opaque to this package; the token engine serialises into it.
    """

    key: str
    type: str
    subject_id: Optional[str] = None
    client_id: str
    creation_time: datetime
    expiration: Optional[datetime] = None
    data: str
