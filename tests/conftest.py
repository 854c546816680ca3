"""
Pytest configuration and fixtures.
The app is built per test against a temporary data directory and a fake clock.
"""
import json
from collections import Counter

import pytest
from fastapi.testclient import TestClient

from teacher_dashboard.main import create_app
from teacher_dashboard.repository import JsonScoreRepository, ScoreRepository
from teacher_dashboard.schemas import HistoricalPerformance, School, Student, StudentScore, Test, User
from teacher_dashboard.settings import Settings

USERS = [
	{"id": "1", "username": "teacher", "passwordHash": "teacher123", "name": "Jane Smith", "email": "jane@school.edu", "role": "teacher"},
	{"id": "2", "username": "admin", "passwordHash": "admin123", "name": "Admin User", "email": "admin@school.edu", "role": "admin"},
]
SCHOOLS = [
	{"id": "SCH1", "name": "Lincoln Elementary", "district": "Springfield Unified"},
	{"id": "SCH2", "name": "Washington Middle", "district": "Springfield Unified"},
]
TESTS = [
	{"id": "1", "name": "Fall Math", "subject": "Math", "maxScore": 100},
	{"id": "2", "name": "Fall ELA", "subject": "ELA", "maxScore": 100},
]
STUDENTS = [
	{"id": "1", "firstName": "Emma", "lastName": "Johnson", "studentId": "S1001", "grade": "5"},
	{"id": "2", "firstName": "Liam", "lastName": "Williams", "studentId": "S1002", "grade": "5"},
	{"id": "3", "firstName": "Olivia", "lastName": "Brown", "studentId": "S1003", "grade": "5"},
]
SCORES = [
	{"studentId": "1", "testId": "2", "score": 80, "percentile": 70, "testDate": "2025-09-22"},
	{"studentId": "2", "testId": "2", "score": 90, "percentile": 88, "testDate": "2025-09-22"},
	{"studentId": "3", "testId": "1", "score": 50, "percentile": 20, "testDate": "2025-09-15"},
]
HISTORICAL = [
	{"year": "2023-2024", "subject": "Math", "classAverage": 79.1, "schoolAverage": 79.9, "districtAverage": 77.8},
	{"year": "2024-2025", "subject": "Math", "classAverage": 81.0, "schoolAverage": 80.6, "districtAverage": 78.7},
]


class FakeClock:
	def __init__(self, start: float = 1_700_000_000.0):
		self.now = start

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


class CountingRepository(ScoreRepository):
	"""In-memory repository that records how often each collection is read."""

	def __init__(self):
		super().__init__()
		self.calls = Counter()
		self.data = {
			"users": [User.model_validate(u) for u in USERS],
			"schools": [School.model_validate(s) for s in SCHOOLS],
			"tests": [Test.model_validate(t) for t in TESTS],
			"students": [Student.model_validate(s) for s in STUDENTS],
			"scores": [StudentScore.model_validate(s) for s in SCORES],
			"historical": [HistoricalPerformance.model_validate(h) for h in HISTORICAL],
		}

	def _get(self, collection):
		self.calls[collection] += 1
		return list(self.data[collection])


def write_data_dir(path, **overrides):
	files = {
		"users.json": USERS,
		"schools.json": SCHOOLS,
		"tests.json": TESTS,
		"students.json": STUDENTS,
		"scores.json": SCORES,
		"historicalPerformance.json": HISTORICAL,
	}
	files.update(overrides)
	path.mkdir(parents=True, exist_ok=True)
	for name, content in files.items():
		if content is None:
			continue
		(path / name).write_text(json.dumps(content), encoding="utf-8")
	return path


@pytest.fixture
def data_dir(tmp_path):
	return write_data_dir(tmp_path / "data")


@pytest.fixture
def clock():
	return FakeClock()


@pytest.fixture
def settings(data_dir):
	return Settings(
		data_dir=data_dir,
		database_url=None,
		jwt_secret_key="test-secret",
		seed_username=None,
		seed_password_plain=None,
	)


@pytest.fixture
def counting_repo():
	return CountingRepository()


@pytest.fixture
def json_repo(data_dir):
	return JsonScoreRepository(data_dir)


@pytest.fixture
def app(settings, clock):
	return create_app(settings, clock=clock)


@pytest.fixture
def client(app):
	return TestClient(app)


@pytest.fixture
def token(client):
	resp = client.post("/auth/login", json={"username": "teacher", "password": "teacher123"})
	assert resp.status_code == 200
	return resp.json()["token"]


@pytest.fixture
def auth_headers(token):
	return {"Authorization": f"Bearer {token}"}
