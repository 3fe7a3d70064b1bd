import pytest

from warden.crud import crud
from warden.models.models import Client as ClientModel
from warden.models.models import ClientCorsOrigin
from warden.schemas import schemas
from warden.services.cors_policy_service import CorsPolicyService
from warden.stores.client_store import ClientStore


@pytest.fixture
def cors_clients(db_session):
    crud.create_client(
        db_session,
        schemas.Client(client_id="spa", allowed_cors_origins=["https://Example.com", "http://localhost:5000"]),
    )
    crud.create_client(
        db_session,
        schemas.Client(client_id="admin", allowed_cors_origins=["https://example.com", "https://admin.example.com"]),
    )
    crud.create_client(db_session, schemas.Client(client_id="backend"))


def test_origin_match_is_case_insensitive(session_factory, cors_clients):
    service = CorsPolicyService(session_factory)

    assert service.is_origin_allowed("https://example.com") is True
    assert service.is_origin_allowed("HTTPS://EXAMPLE.COM") is True
    assert service.is_origin_allowed("https://Admin.Example.com") is True


def test_unknown_origin_is_rejected(session_factory, cors_clients):
    service = CorsPolicyService(session_factory)

    assert service.is_origin_allowed("https://evil.example.com") is False
    assert service.is_origin_allowed("https://example.com:8443") is False


@pytest.mark.parametrize("origin", [None, ""])
def test_null_and_empty_origin_are_rejected(session_factory, cors_clients, origin):
    assert CorsPolicyService(session_factory).is_origin_allowed(origin) is False


def test_allowed_origins_are_deduplicated(session_factory, cors_clients):
    origins = CorsPolicyService(session_factory).allowed_origins()

    assert origins == {"https://example.com", "http://localhost:5000", "https://admin.example.com"}


def test_blank_stored_origins_are_skipped(db_session, session_factory):
    client = ClientModel(client_id="legacy")
    client.allowed_cors_origins = [ClientCorsOrigin(origin=None), ClientCorsOrigin(origin="")]
    db_session.add(client)
    db_session.commit()

    service = CorsPolicyService(session_factory)

    assert service.allowed_origins() == set()
    assert service.is_origin_allowed("") is False


def test_no_clients_means_nothing_allowed(session_factory):
    assert CorsPolicyService(session_factory).is_origin_allowed("https://example.com") is False


def test_new_origins_are_visible_immediately(db_session, session_factory, cors_clients):
    service = CorsPolicyService(session_factory)
    assert service.is_origin_allowed("https://late.example.com") is False

    crud.create_client(db_session, schemas.Client(client_id="late", allowed_cors_origins=["https://late.example.com"]))

    assert service.is_origin_allowed("https://late.example.com") is True


@pytest.mark.asyncio
async def test_async_is_origin_allowed(session_factory, cors_clients):
    assert await CorsPolicyService(session_factory).async_is_origin_allowed("http://LOCALHOST:5000") is True


def test_legacy_client_with_null_origin_is_still_served(db_session, session_factory):
    client = ClientModel(client_id="legacy")
    client.allowed_cors_origins = [ClientCorsOrigin(origin=None), ClientCorsOrigin(origin="https://a.example")]
    db_session.add(client)
    db_session.commit()

    assert CorsPolicyService(session_factory).is_origin_allowed("https://A.example") is True
    assert ClientStore(session_factory).find_client_by_id("legacy").allowed_cors_origins == [None, "https://a.example"]


def test_sharp_s_is_not_expanded(db_session, session_factory):
    crud.create_client(db_session, schemas.Client(client_id="de", allowed_cors_origins=["https://straße.de"]))
    service = CorsPolicyService(session_factory)

    assert service.is_origin_allowed("https://STRASSE.de") is False
    assert service.is_origin_allowed("https://strasse.de") is False
    assert service.is_origin_allowed("https://STRAßE.de") is True
