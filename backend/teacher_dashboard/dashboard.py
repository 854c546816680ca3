from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .aggregation import aggregate, filter_by_test, score_distribution
from .cache import TTLCache, make_key
from .errors import InvalidQuery
from .repository import ScoreRepository
from .schemas import AggregateScores, DashboardResult, School, Scope, Test

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeAverages:
	school: float
	district: float


class ScopeAveragesProvider:
	"""Supplies school- and district-level averages for a selection."""

	def averages(self, school_id: str, school_year: str, test_id: str) -> ScopeAverages:
		raise NotImplementedError


class StaticScopeAverages(ScopeAveragesProvider):
	"""Fixed averages from configuration, until a real source is wired in."""

	def __init__(self, school: float, district: float) -> None:
		self._averages = ScopeAverages(school=school, district=district)

	def averages(self, school_id: str, school_year: str, test_id: str) -> ScopeAverages:
		return self._averages


def _require(**params: Optional[str]) -> None:
	missing = [name for name, value in params.items() if value is None or not str(value).strip()]
	if missing:
		raise InvalidQuery(f"schoolId, schoolYear, and testId are required (missing: {', '.join(missing)})")


class DashboardQueryService:
	def __init__(
		self,
		repository: ScoreRepository,
		cache: TTLCache,
		scope_averages: ScopeAveragesProvider,
		*,
		reference_ttl: float = 30 * 60,
		dashboard_ttl: float = 10 * 60,
		bucket_width: int = 10,
	) -> None:
		self.repository = repository
		self.cache = cache
		self.scope_averages = scope_averages
		self.reference_ttl = reference_ttl
		self.dashboard_ttl = dashboard_ttl
		self.bucket_width = bucket_width

	def get_schools(self) -> List[School]:
		return self.cache.get_or_compute("schools", self.reference_ttl, lambda: list(self.repository.get_schools()))

	def get_tests(self) -> List[Test]:
		return self.cache.get_or_compute("tests", self.reference_ttl, lambda: list(self.repository.get_tests()))

	def get_dashboard(self, school_id: Optional[str], school_year: Optional[str], test_id: Optional[str]) -> DashboardResult:
		_require(schoolId=school_id, schoolYear=school_year, testId=test_id)
		key = make_key("dashboard", school_id, school_year, test_id)
		return self.cache.get_or_compute(
			key,
			self.dashboard_ttl,
			lambda: self._build_dashboard(school_id, school_year, test_id),
		)

	def _max_score(self, test_id: str) -> Optional[int]:
		for test in self.get_tests():
			if test.id == test_id:
				return test.max_score
		return None

	def _build_dashboard(self, school_id: str, school_year: str, test_id: str) -> DashboardResult:
		logger.info("Building dashboard for school=%s year=%s test=%s", school_id, school_year, test_id)
		students = list(self.repository.get_students())
		scores: Sequence = self.repository.get_scores()
		historical = list(self.repository.get_historical())

		test_scores = filter_by_test(scores, test_id)
		classroom = aggregate(
			test_scores,
			test_id,
			scope=Scope.classroom,
			scope_key=make_key(school_id, test_id),
			school_year=school_year,
		)
		wider = self.scope_averages.averages(school_id, school_year, test_id)
		return DashboardResult(
			students=students,
			scores=test_scores,
			aggregate_scores=AggregateScores(
				test_id=test_id,
				school_year=school_year,
				class_average=classroom.mean,
				school_average=wider.school,
				district_average=wider.district,
				total_students=len(students),
				participant_count=classroom.participant_count,
			),
			historical_performance=historical,
			score_distribution=score_distribution(
				test_scores,
				test_id,
				bucket_width=self.bucket_width,
				max_score=self._max_score(test_id),
			),
		)
