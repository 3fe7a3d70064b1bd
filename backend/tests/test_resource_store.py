import pytest

from warden.crud import crud
from warden.models.models import ApiScope as ApiScopeModel
from warden.models.models import ApiScopeClaim as ApiScopeClaimModel
from warden.schemas import schemas
from warden.stores.resource_store import ResourceStore


def test_find_api_resource_is_fully_populated(session_factory, sample_resources):
    api = ResourceStore(session_factory).find_api_resource("api1")

    assert api == sample_resources["apis"][0]
    assert [s.value for s in api.api_secrets] == ["YXBpMQ=="]
    assert api.user_claims == ["tenant"]
    write = next(s for s in api.scopes if s.name == "api1.write")
    assert write.required is True
    assert write.user_claims == ["role", "department"]


def test_find_api_resource_missing(session_factory, sample_resources):
    assert ResourceStore(session_factory).find_api_resource("missing") is None


def test_find_api_resources_by_scope_returns_whole_resources(session_factory, sample_resources):
    apis = ResourceStore(session_factory).find_api_resources_by_scope(["api1.read"])

    assert [a.name for a in apis] == ["api1"]
    # Not narrowed down to the requested scope.
    assert [s.name for s in apis[0].scopes] == ["api1.read", "api1.write", "shared"]


def test_find_api_resources_by_shared_scope_returns_every_owner(session_factory, sample_resources):
    apis = ResourceStore(session_factory).find_api_resources_by_scope({"shared"})

    assert sorted(a.name for a in apis) == ["api1", "api2"]
    api2 = next(a for a in apis if a.name == "api2")
    assert [s.name for s in api2.scopes] == ["api2.full", "shared"]
    assert api2.scopes[1].user_claims == ["email"]


def test_find_api_resources_by_scope_deduplicates(session_factory, sample_resources):
    apis = ResourceStore(session_factory).find_api_resources_by_scope(["api1.read", "api1.write", "shared"])

    assert sorted(a.name for a in apis) == ["api1", "api2"]


def test_find_api_resources_by_scope_empty_input(session_factory, sample_resources):
    store = ResourceStore(session_factory)

    assert store.find_api_resources_by_scope([]) == []
    assert store.find_api_resources_by_scope(["unknown"]) == []


def test_find_identity_resources_by_scope(session_factory, sample_resources):
    resources = ResourceStore(session_factory).find_identity_resources_by_scope(["openid", "email", "nope"])

    assert sorted(r.name for r in resources) == ["email", "openid"]
    openid = next(r for r in resources if r.name == "openid")
    assert openid.required is True
    assert openid.user_claims == ["sub"]


def test_find_identity_resources_empty_input(session_factory, sample_resources):
    assert ResourceStore(session_factory).find_identity_resources_by_scope([]) == []


def test_get_all_resources(session_factory, sample_resources):
    resources = ResourceStore(session_factory).get_all_resources()

    assert resources.identity_resources == sample_resources["identity"]
    assert resources.api_resources == sample_resources["apis"]
    assert resources.find_api_scope("api2.full").name == "api2.full"
    assert resources.find_identity_resource("profile").emphasize is True
    assert resources.find_api_resource("api3").scopes[0].name == "api3.only"
    assert resources.scope_names() == {
        "openid",
        "profile",
        "email",
        "api1.read",
        "api1.write",
        "shared",
        "api2.full",
        "api3.only",
    }


def test_get_all_resources_empty_database(session_factory):
    resources = ResourceStore(session_factory).get_all_resources()

    assert resources.identity_resources == []
    assert resources.api_resources == []


def test_deleting_api_resource_cascades_to_scopes(db_session, session_factory, sample_resources):
    assert crud.delete_api_resource(db_session, "api1") is True

    with session_factory() as db:
        scope_names = {row.name for row in db.query(ApiScopeModel).all()}
        claim_count = db.query(ApiScopeClaimModel).count()

    assert scope_names == {"api2.full", "shared", "api3.only"}
    # Only api2's "shared" scope carries a claim now.
    assert claim_count == 1
    assert ResourceStore(session_factory).find_api_resource("api1") is None


def test_deleting_identity_resource(db_session, session_factory, sample_resources):
    assert crud.delete_identity_resource(db_session, "email") is True
    assert crud.delete_identity_resource(db_session, "email") is False

    names = [r.name for r in ResourceStore(session_factory).get_all_resources().identity_resources]
    assert names == ["openid", "profile"]


def test_resource_without_scopes(db_session, session_factory):
    crud.create_api_resource(db_session, schemas.ApiResource(name="empty"))

    api = ResourceStore(session_factory).find_api_resource("empty")

    assert api.scopes == []
    assert api.api_secrets == []
    assert api.user_claims == []


@pytest.mark.asyncio
async def test_async_surface(session_factory, sample_resources):
    store = ResourceStore(session_factory)

    assert (await store.async_find_api_resource("api2")).name == "api2"
    assert [a.name for a in await store.async_find_api_resources_by_scope(iter(["api3.only"]))] == ["api3"]
    assert [r.name for r in await store.async_find_identity_resources_by_scope(["profile"])] == ["profile"]
    assert len((await store.async_get_all_resources()).api_resources) == 3
