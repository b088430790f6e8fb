"""
Campus Books API - Test Configuration and Fixtures
"""
import os

os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import COLLEGES, ensure_indexes, get_db
from main import app
from schemas import College, Review
from security import issue_token


@pytest.fixture
def db():
    """Fresh in-memory database with the production indexes"""
    database = mongomock.MongoClient()["campus_books_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    """Test client reading and writing the in-memory database"""
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def make(email: str) -> dict:
        return {"Authorization": f"Bearer {issue_token({'email': email})}"}
    return make


@pytest.fixture
def add_college(db):
    """Insert a college whose reviews carry the given ratings; returns its id"""
    def make(name: str, ratings=()) -> str:
        reviews = [
            Review(reviewer_name=f"r{i}", reviewer_email=f"r{i}@mail.com", rating=r, review="ok")
            for i, r in enumerate(ratings)
        ]
        doc = College(name=name, reviews=reviews).model_dump()
        return str(db[COLLEGES].insert_one(doc).inserted_id)
    return make
