"""Record types shared by the repository, the aggregation engine and the API.

JSON field names are camelCase (``firstName``, ``testId``...). Python code uses
the snake_case attribute names; ``model_dump(by_alias=True)`` gives the wire
shape back.
"""
from __future__ import annotations
from enum import Enum
from typing import List, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, allow_inf_nan=False)


class Scope(str, Enum):
	classroom = "classroom"
	school = "school"
	district = "district"


class User(CamelModel):
	id: str
	username: str
	password_hash: str = ""
	name: str = ""
	email: str = ""
	role: str = "teacher"


class UserOut(CamelModel):
	id: str
	username: str
	name: str = ""
	email: str = ""
	role: str = "teacher"


class School(CamelModel):
	id: str
	name: str = ""
	district: str = ""


class Test(CamelModel):
	# keep pytest from collecting this as a test class
	__test__ = False

	id: str
	name: str = ""
	subject: str = "Other"
	max_score: int = 100


class Student(CamelModel):
	id: str
	first_name: str = ""
	last_name: str = ""
	student_id: str = ""
	grade: str = ""

	@property
	def display_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()


class StudentScore(CamelModel):
	student_id: str
	test_id: str
	score: Union[int, float]
	percentile: Union[int, float] = 0
	test_date: str = ""


class HistoricalPerformance(CamelModel):
	year: str
	subject: str = ""
	class_average: float = 0
	school_average: float = 0
	district_average: float = 0


class AggregateResult(CamelModel):
	test_id: str
	scope: Scope
	scope_key: str = ""
	school_year: str = ""
	mean: float = 0
	participant_count: int = 0


class DistributionBucket(CamelModel):
	lower: int
	upper: int
	count: int


class AggregateScores(CamelModel):
	test_id: str
	school_year: str
	class_average: float
	school_average: float
	district_average: float
	total_students: int
	participant_count: int


class DashboardResult(CamelModel):
	students: List[Student]
	scores: List[StudentScore]
	aggregate_scores: AggregateScores
	historical_performance: List[HistoricalPerformance]
	score_distribution: List[DistributionBucket] = []


class LoginRequest(BaseModel):
	username: str = ""
	password: str = ""


class LoginResponse(CamelModel):
	user: UserOut
	token: str
