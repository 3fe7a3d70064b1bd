from sqlalchemy import Boolean
from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy.orm import relationship

from warden.database import Base
from warden.models.enums import ProtocolType
from warden.models.enums import SecretType
from warden.utils.time import utc_now_naive

# ---------------------------------------------------------------------------
# Clients – registered relying-party applications
# ---------------------------------------------------------------------------


class Client(Base):
    """Registered client application.

    ``client_id`` is the only lookup key used by the stores.  Every
    collection hanging off a client is owned by it and disappears with it.
    """

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String(200), unique=True, nullable=False, index=True)
    client_name = Column(String(200), nullable=True)
    description = Column(String(1000), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    protocol_type = Column(String(200), nullable=False, default=ProtocolType.OIDC.value)

    # Behaviour flags --------------------------------------------------------
    require_client_secret = Column(Boolean, nullable=False, default=True)
    require_consent = Column(Boolean, nullable=False, default=True)
    require_pkce = Column(Boolean, nullable=False, default=False)
    allow_offline_access = Column(Boolean, nullable=False, default=False)

    # Lifetimes (seconds) ----------------------------------------------------
    identity_token_lifetime = Column(Integer, nullable=False, default=300)
    access_token_lifetime = Column(Integer, nullable=False, default=3600)
    authorization_code_lifetime = Column(Integer, nullable=False, default=300)
    absolute_refresh_token_lifetime = Column(Integer, nullable=False, default=2592000)
    sliding_refresh_token_lifetime = Column(Integer, nullable=False, default=1296000)

    created = Column(DateTime, nullable=False, default=utc_now_naive)

    # Owned collections ------------------------------------------------------
    allowed_grant_types = relationship(
        "ClientGrantType",
        back_populates="client",
        order_by="ClientGrantType.id",
        cascade="all, delete-orphan",
    )
    redirect_uris = relationship(
        "ClientRedirectUri",
        back_populates="client",
        order_by="ClientRedirectUri.id",
        cascade="all, delete-orphan",
    )
    post_logout_redirect_uris = relationship(
        "ClientPostLogoutRedirectUri",
        back_populates="client",
        order_by="ClientPostLogoutRedirectUri.id",
        cascade="all, delete-orphan",
    )
    allowed_scopes = relationship(
        "ClientScope",
        back_populates="client",
        order_by="ClientScope.id",
        cascade="all, delete-orphan",
    )
    client_secrets = relationship(
        "ClientSecret",
        back_populates="client",
        order_by="ClientSecret.id",
        cascade="all, delete-orphan",
    )
    claims = relationship(
        "ClientClaim",
        back_populates="client",
        order_by="ClientClaim.id",
        cascade="all, delete-orphan",
    )
    identity_provider_restrictions = relationship(
        "ClientIdPRestriction",
        back_populates="client",
        order_by="ClientIdPRestriction.id",
        cascade="all, delete-orphan",
    )
    allowed_cors_origins = relationship(
        "ClientCorsOrigin",
        back_populates="client",
        order_by="ClientCorsOrigin.id",
        cascade="all, delete-orphan",
    )


class ClientGrantType(Base):
    __tablename__ = "client_grant_types"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    grant_type = Column(String(250), nullable=False)

    client = relationship("Client", back_populates="allowed_grant_types")


class ClientRedirectUri(Base):
    __tablename__ = "client_redirect_uris"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    redirect_uri = Column(String(2000), nullable=False)

    client = relationship("Client", back_populates="redirect_uris")


class ClientPostLogoutRedirectUri(Base):
    __tablename__ = "client_post_logout_redirect_uris"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    post_logout_redirect_uri = Column(String(2000), nullable=False)

    client = relationship("Client", back_populates="post_logout_redirect_uris")


class ClientScope(Base):
    __tablename__ = "client_scopes"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    scope = Column(String(200), nullable=False)

    client = relationship("Client", back_populates="allowed_scopes")


class ClientSecret(Base):
    __tablename__ = "client_secrets"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String(2000), nullable=False)
    type = Column(String(250), nullable=True, default=SecretType.SHARED_SECRET.value)
    description = Column(String(2000), nullable=True)
    expiration = Column(DateTime, nullable=True)

    client = relationship("Client", back_populates="client_secrets")


class ClientClaim(Base):
    __tablename__ = "client_claims"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(250), nullable=False)
    value = Column(String(250), nullable=False)

    client = relationship("Client", back_populates="claims")


class ClientIdPRestriction(Base):
    __tablename__ = "client_idp_restrictions"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(String(200), nullable=False)

    client = relationship("Client", back_populates="identity_provider_restrictions")


class ClientCorsOrigin(Base):
    __tablename__ = "client_cors_origins"

    id = Column(Integer, primary_key=True)
    client_pk = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nullable on purpose: rows imported from older configuration can carry
    # an empty origin and the CORS policy has to skip them.
    origin = Column(String(150), nullable=True)

    client = relationship("Client", back_populates="allowed_cors_origins")


# ---------------------------------------------------------------------------
# API resources and their scopes
# ---------------------------------------------------------------------------


class ApiResource(Base):
    __tablename__ = "api_resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    display_name = Column(String(200), nullable=True)
    description = Column(String(1000), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)

    secrets = relationship(
        "ApiSecret",
        back_populates="api_resource",
        order_by="ApiSecret.id",
        cascade="all, delete-orphan",
    )
    scopes = relationship(
        "ApiScope",
        back_populates="api_resource",
        order_by="ApiScope.id",
        cascade="all, delete-orphan",
    )
    user_claims = relationship(
        "ApiResourceClaim",
        back_populates="api_resource",
        order_by="ApiResourceClaim.id",
        cascade="all, delete-orphan",
    )


class ApiSecret(Base):
    __tablename__ = "api_secrets"

    id = Column(Integer, primary_key=True)
    api_resource_id = Column(Integer, ForeignKey("api_resources.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String(2000), nullable=False)
    type = Column(String(250), nullable=True, default=SecretType.SHARED_SECRET.value)
    description = Column(String(1000), nullable=True)
    expiration = Column(DateTime, nullable=True)

    api_resource = relationship("ApiResource", back_populates="secrets")


class ApiResourceClaim(Base):
    __tablename__ = "api_claims"

    id = Column(Integer, primary_key=True)
    api_resource_id = Column(Integer, ForeignKey("api_resources.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(200), nullable=False)

    api_resource = relationship("ApiResource", back_populates="user_claims")


class ApiScope(Base):
    __tablename__ = "api_scopes"

    id = Column(Integer, primary_key=True)
    api_resource_id = Column(Integer, ForeignKey("api_resources.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False, index=True)
    display_name = Column(String(200), nullable=True)
    description = Column(String(1000), nullable=True)
    required = Column(Boolean, nullable=False, default=False)
    emphasize = Column(Boolean, nullable=False, default=False)
    show_in_discovery_document = Column(Boolean, nullable=False, default=True)

    api_resource = relationship("ApiResource", back_populates="scopes")
    user_claims = relationship(
        "ApiScopeClaim",
        back_populates="api_scope",
        order_by="ApiScopeClaim.id",
        cascade="all, delete-orphan",
    )


class ApiScopeClaim(Base):
    __tablename__ = "api_scope_claims"

    id = Column(Integer, primary_key=True)
    api_scope_id = Column(Integer, ForeignKey("api_scopes.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(200), nullable=False)

    api_scope = relationship("ApiScope", back_populates="user_claims")


# ---------------------------------------------------------------------------
# Identity resources
# ---------------------------------------------------------------------------


class IdentityResource(Base):
    __tablename__ = "identity_resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    display_name = Column(String(200), nullable=True)
    description = Column(String(1000), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    required = Column(Boolean, nullable=False, default=False)
    emphasize = Column(Boolean, nullable=False, default=False)
    show_in_discovery_document = Column(Boolean, nullable=False, default=True)

    user_claims = relationship(
        "IdentityClaim",
        back_populates="identity_resource",
        order_by="IdentityClaim.id",
        cascade="all, delete-orphan",
    )


class IdentityClaim(Base):
    __tablename__ = "identity_claims"

    id = Column(Integer, primary_key=True)
    identity_resource_id = Column(
        Integer, ForeignKey("identity_resources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(200), nullable=False)

    identity_resource = relationship("IdentityResource", back_populates="user_claims")


# ---------------------------------------------------------------------------
# Persisted grants – codes, refresh tokens, consents, device codes
# ---------------------------------------------------------------------------


class PersistedGrant(Base):
    """One stored security artifact, keyed by the caller-supplied ``key``.

    ``version`` is SQLAlchemy's optimistic-concurrency counter: every UPDATE
    and DELETE carries ``WHERE version = <loaded value>``, so a writer holding
    a stale row gets :class:`sqlalchemy.orm.exc.StaleDataError` on flush.
    """

    __tablename__ = "persisted_grants"

    key = Column(String(200), primary_key=True)
    type = Column(String(50), nullable=False)
    subject_id = Column(String(200), nullable=True)
    client_id = Column(String(200), nullable=False)
    creation_time = Column(DateTime, nullable=False)
    expiration = Column(DateTime, nullable=True)
    data = Column(Text, nullable=False)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_persisted_grants_subject_client_type", "subject_id", "client_id", "type"),
    )
