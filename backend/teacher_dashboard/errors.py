from __future__ import annotations
from typing import Optional


class DashboardError(Exception):
	"""Base error rendered to clients as {"message", "code"}."""

	status_code = 500
	code = "error"
	default_message = "An error occurred"

	def __init__(self, message: Optional[str] = None) -> None:
		self.message = message or self.default_message
		super().__init__(self.message)


class InvalidQuery(DashboardError):
	status_code = 400
	code = "invalid_query"
	default_message = "schoolId, schoolYear, and testId are required"


class InvalidCredentials(DashboardError):
	status_code = 401
	code = "invalid_credentials"
	default_message = "Invalid credentials"


class Unauthenticated(DashboardError):
	status_code = 401
	code = "unauthenticated"
	default_message = "Could not validate credentials"


class TokenExpired(Unauthenticated):
	code = "token_expired"
	default_message = "Token has expired"


class DataUnavailable(DashboardError):
	status_code = 500
	code = "data_unavailable"
	default_message = "Backing data is unavailable"
