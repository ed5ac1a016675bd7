from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from university_admin.auth.credentials import CredentialService
from university_admin.core.enums import Role
from university_admin.core.exceptions import ConfigurationError, InvalidCredentialError
from university_admin.identities.model import Identity

SECRET = "unit-test-secret"


def _identity(role: Role = Role.TEACHER) -> Identity:
    return Identity(email="john.doe@university.com", display_name="John Doe", password_hash="x", role=role)


def test_issue_then_verify_round_trips_email_role_and_name():
    svc = CredentialService(SECRET)

    credential = svc.verify(svc.issue(_identity()))

    assert credential.subject_email == "john.doe@university.com"
    assert credential.role == Role.TEACHER
    assert credential.display_name == "John Doe"
    assert credential.expires_at - credential.issued_at == timedelta(hours=1)


def test_expired_credential_is_rejected():
    two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    issuer = CredentialService(SECRET, clock=lambda: two_hours_ago)
    token = issuer.issue(_identity())

    with pytest.raises(InvalidCredentialError):
        CredentialService(SECRET).verify(token)


def test_expiry_follows_the_service_clock():
    svc_now = datetime.now(timezone.utc)
    token = CredentialService(SECRET, clock=lambda: svc_now).issue(_identity())
    later = CredentialService(SECRET, clock=lambda: svc_now + timedelta(hours=1, seconds=1))

    with pytest.raises(InvalidCredentialError):
        later.verify(token)


def test_credential_signed_with_another_secret_is_rejected():
    token = CredentialService("some-other-secret").issue(_identity())

    with pytest.raises(InvalidCredentialError):
        CredentialService(SECRET).verify(token)


def test_tampered_payload_is_rejected():
    svc = CredentialService(SECRET)
    header, _payload, signature = svc.issue(_identity()).split(".")
    forged = jwt.encode(
        {"sub": "john.doe@university.com", "role": "admin", "exp": 4102444800, "iat": 0},
        "forger",
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(InvalidCredentialError):
        svc.verify(f"{header}.{forged}.{signature}")


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", None])
def test_malformed_token_is_rejected(token):
    with pytest.raises(InvalidCredentialError):
        CredentialService(SECRET).verify(token)


@pytest.mark.parametrize(
    "claims",
    [
        {"role": "teacher"},
        {"sub": "a@b.com"},
        {"sub": "a@b.com", "role": "janitor"},
        {"sub": "", "role": "teacher"},
    ],
)
def test_signed_but_incomplete_payload_is_rejected(claims):
    now = int(datetime.now(timezone.utc).timestamp())
    token = jwt.encode({**claims, "iat": now, "exp": now + 600}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidCredentialError):
        CredentialService(SECRET).verify(token)


@pytest.mark.parametrize("secret", ["", None])
def test_missing_secret_is_a_configuration_error(secret):
    with pytest.raises(ConfigurationError):
        CredentialService(secret)
