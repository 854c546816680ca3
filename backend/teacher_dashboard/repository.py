"""Read-only access to the dashboard's source collections.

Two backings are provided: a directory of JSON files (the default) and a SQL
database reached through SQLAlchemy. Both load each collection once and keep it
in memory for the life of the process.
"""
from __future__ import annotations
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import make_session_factory
from .errors import DataUnavailable
from .models import HistoricalPerformanceRow, SchoolRow, ScoreRow, StudentRow, TestRow, UserRow
from .schemas import HistoricalPerformance, School, Student, StudentScore, Test, User

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

COLLECTION_FILES: Dict[str, str] = {
	"users": "users.json",
	"schools": "schools.json",
	"tests": "tests.json",
	"students": "students.json",
	"scores": "scores.json",
	"historical": "historicalPerformance.json",
}


def _norm(name: str) -> str:
	return name.replace("_", "").lower()


def normalize_keys(model: Type[BaseModel], raw: Dict[str, Any]) -> Dict[str, Any]:
	"""Map keys like ``FirstName`` or ``first_name`` onto the model's aliases."""
	lookup = {}
	for field_name, field in model.model_fields.items():
		alias = field.alias or field_name
		lookup[_norm(alias)] = alias
		lookup[_norm(field_name)] = alias
	out: Dict[str, Any] = {}
	for key, value in raw.items():
		out[lookup.get(_norm(str(key)), key)] = value
	return out


class ScoreRepository:
	"""Lazy, memoized loader; subclasses implement ``_load``."""

	def __init__(self) -> None:
		self._loaded: Dict[str, List[Any]] = {}
		self._lock = threading.Lock()

	def _load(self, collection: str) -> List[Any]:
		raise NotImplementedError

	def _get(self, collection: str) -> List[Any]:
		cached = self._loaded.get(collection)
		if cached is not None:
			return cached
		with self._lock:
			cached = self._loaded.get(collection)
			if cached is None:
				cached = self._load(collection)
				self._loaded[collection] = cached
				logger.info("Loaded %d %s records", len(cached), collection)
			return cached

	def get_users(self) -> Sequence[User]:
		return tuple(self._get("users"))

	def get_schools(self) -> Sequence[School]:
		return tuple(self._get("schools"))

	def get_tests(self) -> Sequence[Test]:
		return tuple(self._get("tests"))

	def get_students(self) -> Sequence[Student]:
		return tuple(self._get("students"))

	def get_scores(self) -> Sequence[StudentScore]:
		return tuple(self._get("scores"))

	def get_historical(self) -> Sequence[HistoricalPerformance]:
		return tuple(self._get("historical"))

	def warm(self) -> None:
		for collection in COLLECTION_FILES:
			self._get(collection)


class JsonScoreRepository(ScoreRepository):
	MODELS: Dict[str, Type[BaseModel]] = {
		"users": User,
		"schools": School,
		"tests": Test,
		"students": Student,
		"scores": StudentScore,
		"historical": HistoricalPerformance,
	}

	def __init__(self, data_dir: Path) -> None:
		super().__init__()
		self.data_dir = Path(data_dir)

	def _load(self, collection: str) -> List[Any]:
		if not self.data_dir.is_dir():
			raise DataUnavailable(f"Data directory not found: {self.data_dir}")
		path = self.data_dir / COLLECTION_FILES[collection]
		if not path.exists():
			logger.warning("Data file %s is missing; treating %s as empty", path, collection)
			return []
		try:
			raw = json.loads(path.read_text(encoding="utf-8"))
		except (OSError, ValueError) as exc:
			logger.error("Could not read %s: %s", path, exc)
			raise DataUnavailable(f"Could not read {path.name}") from exc
		if raw is None:
			return []
		if not isinstance(raw, list):
			raise DataUnavailable(f"{path.name} must contain a JSON array")
		return _parse_records(self.MODELS[collection], raw, path.name)


def _parse_records(model: Type[M], raw: List[Any], source: str) -> List[M]:
	records: List[M] = []
	for idx, item in enumerate(raw):
		if not isinstance(item, dict):
			raise DataUnavailable(f"{source}[{idx}] is not an object")
		try:
			records.append(model.model_validate(normalize_keys(model, item)))
		except ValidationError as exc:
			logger.error("Invalid record %s[%d]: %s", source, idx, exc)
			raise DataUnavailable(f"Invalid record in {source}") from exc
	return records


def _user(row: UserRow) -> User:
	return User(id=row.id, username=row.username, password_hash=row.password_hash, name=row.name, email=row.email, role=row.role)


def _school(row: SchoolRow) -> School:
	return School(id=row.id, name=row.name, district=row.district)


def _test(row: TestRow) -> Test:
	return Test(id=row.id, name=row.name, subject=row.subject, max_score=row.max_score)


def _student(row: StudentRow) -> Student:
	return Student(id=row.id, first_name=row.first_name, last_name=row.last_name, student_id=row.student_id, grade=row.grade)


def _score(row: ScoreRow) -> StudentScore:
	score = int(row.score) if float(row.score).is_integer() else row.score
	percentile = int(row.percentile) if float(row.percentile).is_integer() else row.percentile
	return StudentScore(student_id=row.student_id, test_id=row.test_id, score=score, percentile=percentile, test_date=row.test_date)


def _historical(row: HistoricalPerformanceRow) -> HistoricalPerformance:
	return HistoricalPerformance(
		year=row.year,
		subject=row.subject,
		class_average=row.class_average,
		school_average=row.school_average,
		district_average=row.district_average,
	)


class SqlScoreRepository(ScoreRepository):
	TABLES: Dict[str, tuple[type, Callable[[Any], BaseModel]]] = {
		"users": (UserRow, _user),
		"schools": (SchoolRow, _school),
		"tests": (TestRow, _test),
		"students": (StudentRow, _student),
		"scores": (ScoreRow, _score),
		"historical": (HistoricalPerformanceRow, _historical),
	}

	def __init__(self, engine: Engine) -> None:
		super().__init__()
		self.engine = engine
		self._sessions = make_session_factory(engine)

	def _load(self, collection: str) -> List[Any]:
		row_type, convert = self.TABLES[collection]
		try:
			with self._sessions() as db:
				rows = db.execute(select(row_type).order_by(row_type.id)).scalars().all()
				return [convert(r) for r in rows]
		except (SQLAlchemyError, ValidationError) as exc:
			logger.error("Could not load %s from database: %s", collection, exc)
			raise DataUnavailable(f"Could not load {collection}") from exc
