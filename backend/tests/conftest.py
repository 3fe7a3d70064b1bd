import os
from datetime import datetime
from datetime import timedelta

# The database module resolves its default engine at import time; make sure
# that resolves to an in-memory database before anything imports it.
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("NODE_ENV", "test")

import pytest  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import warden.database as _db_mod  # noqa: E402
from warden.crud import crud  # noqa: E402
from warden.database import drop_database  # noqa: E402
from warden.database import initialize_database  # noqa: E402
from warden.database import make_engine  # noqa: E402
from warden.database import make_sessionmaker  # noqa: E402
from warden.models.models import PersistedGrant as PersistedGrantModel  # noqa: E402
from warden.schemas import schemas  # noqa: E402

# Create a test database - using in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

test_engine = make_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool for in-memory database
)

TestingSessionLocal = make_sessionmaker(test_engine)

# Stores built without an explicit factory fall back to this one.
_db_mod.default_session_factory = TestingSessionLocal


@pytest.fixture
def db_session():
    """
    Creates a fresh database for each test, then tears it down after the test is done.
    """
    initialize_database(test_engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        drop_database(test_engine)


@pytest.fixture
def session_factory(db_session):
    """Session factory bound to the per-test schema."""

    return TestingSessionLocal


@pytest.fixture
def file_session_factory(tmp_path):
    """Factory for a file-backed SQLite database.

    Race tests need separate connections that really commit independently,
    which a StaticPool in-memory database cannot provide.
    """

    engine = make_engine(f"sqlite:///{tmp_path / 'warden.db'}")
    initialize_database(engine)
    try:
        yield make_sessionmaker(engine)
    finally:
        engine.dispose()


@pytest.fixture
def make_grant():
    """Build :class:`PersistedGrant` models with sensible defaults."""

    def _make(key="g1", type="refresh_token", subject_id="u1", client_id="c1", data="X", **kwargs):
        created = kwargs.pop("creation_time", datetime(2024, 1, 1, 12, 0, 0))
        return schemas.PersistedGrant(
            key=key,
            type=type,
            subject_id=subject_id,
            client_id=client_id,
            creation_time=created,
            expiration=kwargs.pop("expiration", created + timedelta(days=30)),
            data=data,
            **kwargs,
        )

    return _make


@pytest.fixture
def count_grants():
    """Count ``persisted_grants`` rows (optionally for one key) in a fresh session."""

    def _count(factory, key=None):
        with factory() as db:
            query = db.query(PersistedGrantModel)
            if key is not None:
                query = query.filter(PersistedGrantModel.key == key)
            return query.count()

    return _count


@pytest.fixture
def sample_client(db_session):
    """A fully configured client with every collection populated."""

    client = schemas.Client(
        client_id="web",
        client_name="Web Application",
        require_pkce=True,
        allow_offline_access=True,
        access_token_lifetime=600,
        allowed_grant_types=["authorization_code", "client_credentials"],
        redirect_uris=["https://web.example.com/signin-oidc"],
        post_logout_redirect_uris=["https://web.example.com/signout-callback-oidc"],
        allowed_scopes=["openid", "profile", "api1"],
        client_secrets=[
            schemas.Secret(value="c2VjcmV0", description="primary"),
            schemas.Secret(value="b2xk", expiration=datetime(2030, 1, 1)),
        ],
        claims=[schemas.ClientClaim(type="tenant", value="acme")],
        identity_provider_restrictions=["Google"],
        allowed_cors_origins=["https://Web.Example.com"],
    )
    crud.create_client(db_session, client)
    return client


@pytest.fixture
def sample_resources(db_session):
    """Identity resources plus two API resources sharing a scope name."""

    identity = [
        schemas.IdentityResource(name="openid", required=True, user_claims=["sub"]),
        schemas.IdentityResource(name="profile", emphasize=True, user_claims=["name", "family_name"]),
        schemas.IdentityResource(name="email", user_claims=["email", "email_verified"]),
    ]
    apis = [
        schemas.ApiResource(
            name="api1",
            display_name="Orders API",
            api_secrets=[schemas.Secret(value="YXBpMQ==")],
            scopes=[
                schemas.Scope(name="api1.read", user_claims=["role"]),
                schemas.Scope(name="api1.write", required=True, user_claims=["role", "department"]),
                schemas.Scope(name="shared"),
            ],
            user_claims=["tenant"],
        ),
        schemas.ApiResource(
            name="api2",
            scopes=[
                schemas.Scope(name="api2.full"),
                schemas.Scope(name="shared", user_claims=["email"]),
            ],
        ),
        schemas.ApiResource(name="api3", scopes=[schemas.Scope(name="api3.only")]),
    ]

    for resource in identity:
        crud.create_identity_resource(db_session, resource)
    for resource in apis:
        crud.create_api_resource(db_session, resource)

    return {"identity": identity, "apis": apis}
