from unittest.mock import AsyncMock

import pytest

from helpers.mock_repository import MockRepository
from intake_workflow.admin import AdminService
from intake_workflow.workflow import IntakeWorkflow


@pytest.fixture
def mock_repo():
    """Fresh MockRepository for each test."""
    return MockRepository()


@pytest.fixture
def mock_db():
    """AsyncMock standing in for AsyncSession — flush/commit are no-ops."""
    return AsyncMock()


@pytest.fixture
def workflow(mock_repo):
    """IntakeWorkflow with the in-memory repository."""
    wf = IntakeWorkflow()
    wf._repo = mock_repo
    return wf


@pytest.fixture
def admin(mock_repo):
    """AdminService sharing the workflow's in-memory repository."""
    svc = AdminService()
    svc._repo = mock_repo
    return svc
