"""Configuration writes: seed and admin helpers.

The stores treat clients and resources as read-only.  Deployments (and the
test-suite) populate them through these helpers, which take an open session,
build rows with the mappers and commit.
"""

from typing import Optional

from sqlalchemy.orm import Session

from warden.mappers.mappers import api_resource_to_entity
from warden.mappers.mappers import client_to_entity
from warden.mappers.mappers import identity_resource_to_entity
from warden.models.models import ApiResource as ApiResourceModel
from warden.models.models import Client as ClientModel
from warden.models.models import IdentityResource as IdentityResourceModel
from warden.schemas import schemas


# Client CRUD operations
def create_client(db: Session, client: schemas.Client) -> ClientModel:
    """Insert *client* with all of its owned collections."""

    db_client = client_to_entity(client)
    db.add(db_client)
    db.commit()
    db.refresh(db_client)
    return db_client


def get_client_row(db: Session, client_id: str) -> Optional[ClientModel]:
    return db.query(ClientModel).filter(ClientModel.client_id == client_id).first()


def delete_client(db: Session, client_id: str) -> bool:
    """Delete a client and everything it owns.  Returns ``False`` if absent."""

    db_client = get_client_row(db, client_id)
    if db_client is None:
        return False

    db.delete(db_client)
    db.commit()
    return True


# API resource CRUD operations
def create_api_resource(db: Session, resource: schemas.ApiResource) -> ApiResourceModel:
    db_resource = api_resource_to_entity(resource)
    db.add(db_resource)
    db.commit()
    db.refresh(db_resource)
    return db_resource


def delete_api_resource(db: Session, name: str) -> bool:
    """Delete an API resource; its secrets, scopes and scope claims go with it."""

    db_resource = db.query(ApiResourceModel).filter(ApiResourceModel.name == name).first()
    if db_resource is None:
        return False

    db.delete(db_resource)
    db.commit()
    return True


# Identity resource CRUD operations
def create_identity_resource(db: Session, resource: schemas.IdentityResource) -> IdentityResourceModel:
    db_resource = identity_resource_to_entity(resource)
    db.add(db_resource)
    db.commit()
    db.refresh(db_resource)
    return db_resource


def delete_identity_resource(db: Session, name: str) -> bool:
    db_resource = db.query(IdentityResourceModel).filter(IdentityResourceModel.name == name).first()
    if db_resource is None:
        return False

    db.delete(db_resource)
    db.commit()
    return True
