"""Shared *Enum* definitions for SQLAlchemy & Pydantic models.

The Enums inherit from ``str`` so that:

* JSON serialisation remains unchanged (values render as plain strings).
* Equality checks against raw literals (``grant.type == "refresh_token"``)
  keep working.
"""

from __future__ import annotations

from enum import Enum


class PersistedGrantType(str, Enum):
    """Well-known persisted grant kinds.

    The ``persisted_grants.type`` column is a free-form string; these are the
    values the token engine writes today.
    """

    AUTHORIZATION_CODE = "authorization_code"
    REFERENCE_TOKEN = "reference_token"
    REFRESH_TOKEN = "refresh_token"
    USER_CONSENT = "user_consent"
    DEVICE_CODE = "device_code"


class StoreResult(str, Enum):
    """Outcome of a grant-store write.

    ``CONFLICT_IGNORED`` means another writer changed or removed the same row
    first; the write was rolled back and logged instead of raised.
    """

    APPLIED = "applied"
    NOT_FOUND = "not_found"
    CONFLICT_IGNORED = "conflict_ignored"


class SecretType(str, Enum):
    SHARED_SECRET = "SharedSecret"
    X509_THUMBPRINT = "X509Thumbprint"
    X509_NAME = "X509Name"
    X509_CERTIFICATE_BASE64 = "X509CertificateBase64"


class ProtocolType(str, Enum):
    OIDC = "oidc"
    WS_FEDERATION = "wsfed"
    SAML2P = "saml2p"
