import sys
from pathlib import Path

import pytest

# (1) Add repository root to sys.path to enable absolute imports
#     The root directory contains scripts/, src/, and config/.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from resalloc.registry.registry import EntityRegistry  # noqa: E402


@pytest.fixture()
def registry() -> EntityRegistry:
    """Fresh, empty registry per test."""
    return EntityRegistry()


@pytest.fixture()
def valid_client() -> dict:
    """Client record that passes every default client rule."""
    return {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": 3, "budget": 5000}


@pytest.fixture()
def valid_worker() -> dict:
    """Worker record that passes every default worker rule."""
    return {
        "WorkerID": "W1",
        "name": "Ada",
        "email": "ada@example.com",
        "hourlyRate": 80,
        "skills": ["python"],
        "availability": "available",
    }


@pytest.fixture()
def valid_task() -> dict:
    """Task record that passes every default task rule and the structural checks."""
    return {
        "TaskID": "T1",
        "title": "Dashboard",
        "deadline": "2999-01-01",
        "estimatedHours": 10,
        "priority": "high",
        "Duration": 2,
    }
