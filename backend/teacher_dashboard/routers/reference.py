from typing import List

from fastapi import APIRouter, Depends

from ..dashboard import DashboardQueryService
from ..deps import get_dashboard_service
from ..schemas import School, Test
from ..security import TokenClaims
from .auth import get_current_user

router = APIRouter(tags=["reference"])


@router.get("/schools", response_model=List[School], response_model_by_alias=True)
def get_schools(
	user: TokenClaims = Depends(get_current_user),
	service: DashboardQueryService = Depends(get_dashboard_service),
):
	return service.get_schools()


@router.get("/tests", response_model=List[Test], response_model_by_alias=True)
def get_tests(
	user: TokenClaims = Depends(get_current_user),
	service: DashboardQueryService = Depends(get_dashboard_service),
):
	return service.get_tests()
