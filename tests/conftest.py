"""Shared fixtures: an in-memory MongoDB per test."""

import mongomock
import pytest

from models.location import Location
from models.student import Hobby, Student
from repositories.context import build_context


@pytest.fixture
def client():
    return mongomock.MongoClient()


@pytest.fixture
def database(client):
    return client["test"]


@pytest.fixture
def context(client):
    return build_context(client, "test")


@pytest.fixture
def warsaw():
    return Location(city="Warsaw", postal_code="00-001")


@pytest.fixture
def alice(warsaw):
    return Student(name="Alice", mail="a@example.com", location=warsaw, hobbies=[Hobby("chess")])
