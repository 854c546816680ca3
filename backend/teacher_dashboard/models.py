from __future__ import annotations
from sqlalchemy import Column, Float, Integer, String
from .db import Base


class UserRow(Base):
	__tablename__ = "users"
	id = Column(String(64), primary_key=True)
	username = Column(String(128), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	name = Column(String(256), default="", nullable=False)
	email = Column(String(256), default="", nullable=False)
	role = Column(String(32), default="teacher", nullable=False)


class SchoolRow(Base):
	__tablename__ = "schools"
	id = Column(String(64), primary_key=True)
	name = Column(String(256), default="", nullable=False)
	district = Column(String(256), default="", nullable=False)


class TestRow(Base):
	__tablename__ = "tests"
	__test__ = False
	id = Column(String(64), primary_key=True)
	name = Column(String(256), default="", nullable=False)
	subject = Column(String(32), default="Other", nullable=False)
	max_score = Column(Integer, default=100, nullable=False)


class StudentRow(Base):
	__tablename__ = "students"
	id = Column(String(64), primary_key=True)
	first_name = Column(String(128), default="", nullable=False)
	last_name = Column(String(128), default="", nullable=False)
	student_id = Column(String(64), default="", nullable=False)
	grade = Column(String(16), default="", nullable=False)


class ScoreRow(Base):
	__tablename__ = "scores"
	# One record per student per test per year
	id = Column(Integer, primary_key=True, autoincrement=True)
	student_id = Column(String(64), index=True, nullable=False)
	test_id = Column(String(64), index=True, nullable=False)
	score = Column(Float, nullable=False)
	percentile = Column(Float, default=0, nullable=False)
	test_date = Column(String(32), default="", nullable=False)


class HistoricalPerformanceRow(Base):
	__tablename__ = "historical_performance"
	id = Column(Integer, primary_key=True, autoincrement=True)
	year = Column(String(16), nullable=False)
	subject = Column(String(32), default="", nullable=False)
	class_average = Column(Float, default=0, nullable=False)
	school_average = Column(Float, default=0, nullable=False)
	district_average = Column(Float, default=0, nullable=False)
