from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from ..deps import get_auth_gate
from ..errors import Unauthenticated
from ..schemas import LoginRequest, LoginResponse
from ..security import AuthGate, TokenClaims

router = APIRouter(prefix="/auth", tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)


class Me(BaseModel):
	id: str
	username: str
	role: str
	expires_at: int


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
def login(req: LoginRequest, gate: AuthGate = Depends(get_auth_gate)):
	result = gate.login(req.username, req.password)
	return LoginResponse(user=result.user, token=result.token)


def get_current_user(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
	gate: AuthGate = Depends(get_auth_gate),
) -> TokenClaims:
	# Fail closed: no credentials, wrong scheme, bad or expired token all stop here
	if credentials is None or credentials.scheme.lower() != "bearer":
		raise Unauthenticated("Missing bearer token")
	return gate.verify(credentials.credentials)


@router.get("/me", response_model=Me)
def me(user: TokenClaims = Depends(get_current_user)):
	return Me(id=user.subject_id, username=user.username, role=user.role, expires_at=user.expires_at)
