import pytest
from jose import jwt

from teacher_dashboard.errors import InvalidCredentials, TokenExpired, Unauthenticated
from teacher_dashboard.repository import JsonScoreRepository
from teacher_dashboard.security import AuthGate, verify_password

from conftest import write_data_dir


@pytest.fixture
def gate(counting_repo, settings, clock):
	return AuthGate(counting_repo, settings, clock=clock)


def test_login_issues_token_the_gate_accepts(gate):
	result = gate.login("teacher", "teacher123")
	assert result.user.username == "teacher"
	assert result.user.role == "teacher"
	assert "password_hash" not in result.user.model_dump()
	claims = gate.verify(result.token)
	assert claims.subject_id == "1"
	assert claims.username == "teacher"
	assert claims.expires_at - claims.issued_at == 60 * 60


@pytest.mark.parametrize("username,password", [
	("teacher", "wrong"),
	("nobody", "teacher123"),
	("", ""),
])
def test_login_rejects_bad_credentials(gate, username, password):
	with pytest.raises(InvalidCredentials):
		gate.login(username, password)


def test_token_expires(gate, clock):
	token = gate.login("teacher", "teacher123").token
	clock.advance(59 * 60)
	gate.verify(token)
	clock.advance(60)
	with pytest.raises(TokenExpired):
		gate.verify(token)


def test_expired_is_a_kind_of_unauthenticated(gate, clock):
	token = gate.login("admin", "admin123").token
	clock.advance(2 * 60 * 60)
	with pytest.raises(Unauthenticated):
		gate.verify(token)


def test_wrong_secret_is_rejected(gate, settings, clock):
	forged = jwt.encode(
		{"sub": "1", "iat": int(clock()), "exp": int(clock()) + 600, "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
		"some-other-secret",
		algorithm="HS256",
	)
	with pytest.raises(Unauthenticated) as exc_info:
		gate.verify(forged)
	assert not isinstance(exc_info.value, TokenExpired)


def test_wrong_audience_is_rejected(gate, settings, clock):
	token = jwt.encode(
		{"sub": "1", "iat": int(clock()), "exp": int(clock()) + 600, "iss": settings.jwt_issuer, "aud": "elsewhere"},
		settings.jwt_secret_key,
		algorithm="HS256",
	)
	with pytest.raises(Unauthenticated):
		gate.verify(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_garbage_tokens_are_rejected(gate, token):
	with pytest.raises(Unauthenticated):
		gate.verify(token)


def test_token_without_subject_is_rejected(gate, settings, clock):
	token = jwt.encode(
		{"iat": int(clock()), "exp": int(clock()) + 600, "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
		settings.jwt_secret_key,
		algorithm="HS256",
	)
	with pytest.raises(Unauthenticated):
		gate.verify(token)


def test_verify_password_plaintext_entries():
	assert verify_password("teacher123", "teacher123")
	assert not verify_password("teacher124", "teacher123")


def test_user_without_password_hash_cannot_log_in(tmp_path, settings, clock):
	data_dir = write_data_dir(tmp_path / "data", **{"users.json": [{"id": "9", "username": "ghost"}]})
	gate = AuthGate(JsonScoreRepository(data_dir), settings, clock=clock)
	for password in ("", "anything"):
		with pytest.raises(InvalidCredentials):
			gate.login("ghost", password)


def test_empty_password_never_verifies():
	assert not verify_password("", "")
	assert not verify_password("", "teacher123")
	assert not verify_password("teacher123", "")


def test_long_plaintext_password_is_not_truncated(tmp_path, settings, clock):
	password = "p" * 80
	data_dir = write_data_dir(tmp_path / "data", **{
		"users.json": [{"id": "7", "username": "long", "passwordHash": password}],
	})
	gate = AuthGate(JsonScoreRepository(data_dir), settings, clock=clock)
	assert gate.login("long", password).user.id == "7"
	with pytest.raises(InvalidCredentials):
		gate.login("long", "p" * 72)
