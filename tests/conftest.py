"""
Shared pytest fixtures for relquery tests.

Fresh copies of every sample table are returned per test so a query that
mutated its input would be caught by the next assertion.
"""

import pytest


@pytest.fixture
def persons():
    """Person records used by the select/where/group by tests."""
    return [
        {"name": "Peter", "profession": "teacher", "age": 20, "marital_status": "married"},
        {"name": "Michael", "profession": "teacher", "age": 50, "marital_status": "single"},
        {"name": "Peter", "profession": "teacher", "age": 20, "marital_status": "married"},
        {"name": "Anna", "profession": "scientific", "age": 20, "marital_status": "married"},
        {"name": "Rose", "profession": "scientific", "age": 50, "marital_status": "married"},
        {"name": "Anna", "profession": "scientific", "age": 20, "marital_status": "single"},
        {"name": "Anna", "profession": "politician", "age": 50, "marital_status": "married"},
    ]


@pytest.fixture
def numbers():
    return [1, 2, 3, 4, 5, 6, 7, 8, 9]


@pytest.fixture
def teachers():
    return [
        {"teacher_id": "1", "teacher_name": "Peter"},
        {"teacher_id": "2", "teacher_name": "Anna"},
    ]


@pytest.fixture
def students():
    return [
        {"student_name": "Michael", "tutor": "1"},
        {"student_name": "Rose", "tutor": "2"},
    ]
