from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .errors import InvalidCredentials, TokenExpired, Unauthenticated
from .repository import ScoreRepository
from .schemas import User, UserOut
from .settings import Settings

logger = logging.getLogger(__name__)

logging.getLogger('passlib').setLevel(logging.ERROR)
# Plaintext entries are accepted for demo data files; new hashes are bcrypt
pwd_context = CryptContext(schemes=["bcrypt", "plaintext"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
	subject_id: str
	username: str
	role: str
	issued_at: int
	expires_at: int


@dataclass(frozen=True)
class LoginResult:
	user: UserOut
	token: str


def _truncate_for_bcrypt(password: str) -> str:
	password_bytes = password.encode('utf-8')
	if len(password_bytes) > 72:
		password_bytes = password_bytes[:72]
	return password_bytes.decode('utf-8', errors='ignore')


def verify_password(plain_password: str, hashed_password: str) -> bool:
	# plaintext identifies any string, so an empty side must never match
	if not plain_password or not hashed_password:
		return False
	try:
		if pwd_context.identify(hashed_password) == "bcrypt":
			plain_password = _truncate_for_bcrypt(plain_password)
		return pwd_context.verify(plain_password, hashed_password)
	except (ValueError, TypeError):
		return False


class AuthGate:
	"""Issues and checks bearer tokens.

	Users come from the repository, plus an optional seed user configured in
	settings. ``clock`` returns epoch seconds and drives both ``iat``/``exp``
	on issue and the expiry check on verify.
	"""

	def __init__(self, repository: ScoreRepository, settings: Settings, clock: Callable[[], float] = time.time) -> None:
		self.repository = repository
		self.settings = settings
		self.clock = clock
		self._seed_users: Dict[str, User] = {}

	def _ensure_seed_user(self) -> None:
		username = self.settings.seed_username
		password = self.settings.seed_password_plain
		if username and password and username not in self._seed_users:
			self._seed_users[username] = User(
				id=f"seed-{username}",
				username=username,
				password_hash=pwd_context.hash(_truncate_for_bcrypt(password)),
				name=username,
				role="teacher",
			)

	def authenticate_user(self, username: str, password: str) -> Optional[User]:
		for user in self.repository.get_users():
			if user.username == username:
				return user if verify_password(password, user.password_hash) else None
		self._ensure_seed_user()
		seed = self._seed_users.get(username)
		if seed and verify_password(password, seed.password_hash):
			return seed
		return None

	def login(self, username: str, password: str) -> LoginResult:
		logger.info("Login attempt for username: %s", username)
		user = self.authenticate_user(username or "", password or "")
		if user is None:
			logger.warning("Login failed for username: %s", username)
			raise InvalidCredentials()
		token = self.issue_token(user)
		return LoginResult(user=UserOut(**user.model_dump(exclude={"password_hash"})), token=token)

	def issue_token(self, user: User, expires_minutes: Optional[float] = None) -> str:
		minutes = expires_minutes if expires_minutes is not None else self.settings.access_token_expire_minutes
		issued_at = int(self.clock())
		to_encode = {
			"sub": user.id,
			"username": user.username,
			"role": user.role,
			"iat": issued_at,
			"exp": issued_at + int(minutes * 60),
			"iss": self.settings.jwt_issuer,
			"aud": self.settings.jwt_audience,
		}
		return jwt.encode(to_encode, self.settings.jwt_secret_key, algorithm=self.settings.jwt_algorithm)

	def verify(self, token: str) -> TokenClaims:
		if not token:
			raise Unauthenticated("Missing bearer token")
		try:
			# Expiry is checked below against the gate's own clock
			payload = jwt.decode(
				token,
				self.settings.jwt_secret_key,
				algorithms=[self.settings.jwt_algorithm],
				audience=self.settings.jwt_audience,
				issuer=self.settings.jwt_issuer,
				options={"verify_exp": False},
			)
		except JWTError:
			raise Unauthenticated()
		subject = payload.get("sub")
		exp = payload.get("exp")
		if not subject or not isinstance(exp, int):
			raise Unauthenticated()
		if self.clock() >= exp:
			raise TokenExpired()
		return TokenClaims(
			subject_id=subject,
			username=str(payload.get("username", "")),
			role=str(payload.get("role", "")),
			issued_at=int(payload.get("iat", 0)),
			expires_at=exp,
		)
