from fastapi import Request

from .dashboard import DashboardQueryService
from .security import AuthGate


def get_auth_gate(request: Request) -> AuthGate:
	return request.app.state.auth_gate


def get_dashboard_service(request: Request) -> DashboardQueryService:
	return request.app.state.dashboard_service
