import pytest

from booking_api.application.ports.user_repo import UserRole
from booking_api.application.services.auth_service import AuthService
from booking_api.exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from booking_api.infrastructure.security.passwords import BcryptPasswordHasher
from booking_api.infrastructure.security.tokens import JwtTokenIssuer

from .conftest import TEST_SECRET


class FakeHasher:
    def hash(self, password: str) -> str:
        return "hashed:" + password

    def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == "hashed:" + password


@pytest.fixture
def auth(store, audit):
    return AuthService(
        user_repo=store.users,
        hasher=FakeHasher(),
        tokens=JwtTokenIssuer(secret_key=TEST_SECRET),
        audit=audit,
    )


def test_register_doctor_and_patient(auth):
    doc = auth.register("Dr. A", "Dr.A@Example.com", "secret1", "DOCTOR", specialization="Cardiology")
    assert doc.role == UserRole.DOCTOR
    assert doc.email == "dr.a@example.com"
    assert doc.password_hash == "hashed:secret1"

    pat = auth.register("P", "p@example.com", "secret1", "patient", specialization="Cardiology")
    assert pat.role == UserRole.PATIENT
    assert pat.specialization is None
    assert "password_hash" not in pat.profile()


def test_register_requires_fields(auth):
    with pytest.raises(ValidationError, match="missing required fields"):
        auth.register("P", None, "secret1", "PATIENT")
    with pytest.raises(ValidationError, match="missing required fields"):
        auth.register("   ", "blank@example.com", "secret1", "PATIENT")
    with pytest.raises(ValidationError, match="invalid role"):
        auth.register("P", "p@example.com", "secret1", "ADMIN")
    with pytest.raises(ValidationError, match="specialization required"):
        auth.register("Dr. A", "a@example.com", "secret1", "DOCTOR", specialization="  ")


def test_email_unique_across_roles(auth):
    auth.register("P", "same@example.com", "secret1", "PATIENT")
    with pytest.raises(ConflictError, match="email already registered"):
        auth.register("Dr. A", "SAME@example.com", "secret1", "DOCTOR", specialization="Urology")


def test_login_and_authenticate(auth, audit):
    user = auth.register("P", "p@example.com", "secret1", "PATIENT")
    logged_in, token = auth.login("p@example.com", "secret1", "PATIENT")
    assert logged_in.id == user.id
    actor = auth.authenticate(token)
    assert actor.user_id == user.id
    assert actor.role == UserRole.PATIENT
    assert ("user.login", user.id, user.id, True, {}) in audit.entries


def test_login_failures(auth):
    auth.register("P", "p@example.com", "secret1", "PATIENT")
    with pytest.raises(ValidationError, match="missing credentials"):
        auth.login("p@example.com", "", "PATIENT")
    # account exists, but not with this role
    with pytest.raises(NotFoundError, match="user not found"):
        auth.login("p@example.com", "secret1", "DOCTOR")
    with pytest.raises(AuthError, match="invalid password"):
        auth.login("p@example.com", "wrong-password", "PATIENT")


def test_authenticate_rejects_bad_tokens(auth):
    with pytest.raises(AuthError):
        auth.authenticate("not-a-jwt")
    foreign = JwtTokenIssuer(secret_key="another-secret-key-that-is-long-enough").issue("someone")
    with pytest.raises(AuthError):
        auth.authenticate(foreign)
    unknown_user = JwtTokenIssuer(secret_key=TEST_SECRET).issue("ghost")
    with pytest.raises(AuthError, match="unknown user"):
        auth.authenticate(unknown_user)


def test_expired_token_decodes_to_none():
    issuer = JwtTokenIssuer(secret_key=TEST_SECRET, expires_minutes=-5)
    assert issuer.decode(issuer.issue("u1")) is None


def test_bcrypt_hasher_roundtrip():
    hasher = BcryptPasswordHasher(rounds=4)
    hashed = hasher.hash("secret1")
    assert hashed != "secret1"
    assert hasher.verify("secret1", hashed)
    assert not hasher.verify("secret2", hashed)
    assert not hasher.verify("secret1", "not-a-bcrypt-hash")
