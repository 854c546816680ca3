from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dashboard import DashboardQueryService
from ..deps import get_dashboard_service
from ..schemas import DashboardResult
from ..security import TokenClaims
from .auth import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResult, response_model_by_alias=True)
def get_dashboard(
	school_id: Optional[str] = Query(default=None, alias="schoolId"),
	school_year: Optional[str] = Query(default=None, alias="schoolYear"),
	test_id: Optional[str] = Query(default=None, alias="testId"),
	user: TokenClaims = Depends(get_current_user),
	service: DashboardQueryService = Depends(get_dashboard_service),
):
	# Missing parameters are reported by the service as a 400, not FastAPI's 422
	return service.get_dashboard(school_id, school_year, test_id)
