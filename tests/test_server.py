"""HTTP layer tests — routes, error mapping and the transaction dependency.

Routes run against a real FastAPI app whose ``get_db`` is overridden with
an AsyncMock session and whose services share one MockRepository.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

import intake_server.app as app_module
from helpers.payloads import JANE, STEP_PAYLOADS, ifc_prefill, odi
from intake_server import dependencies
from intake_server.app import create_app
from intake_server.config import ServerSettings
from intake_server.dependencies import get_admin, get_db, get_workflow
from intake_workflow.errors import StorageFailure

API = "/api/v1"
STEP_PATHS = {1: "odi", 2: "vas", 3: "eq5d", 4: "consent", 5: "ifc"}


@pytest.fixture
def app(workflow, admin):
    app = create_app(ServerSettings())

    async def _fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = _fake_db
    app.dependency_overrides[get_workflow] = lambda: workflow
    app.dependency_overrides[get_admin] = lambda: admin
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def _create(client, payload=JANE):
    response = client.post(f"{API}/sessions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# =====================================================================
# Patient-facing routes
# =====================================================================


class TestSessionRoutes:
    def test_create_and_get(self, client):
        created = _create(client)
        assert created["success"] is True
        assert created["patient_id"] == 1

        response = client.get(f"{API}/sessions/{created['session_token']}")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Jane Doe"
        assert body["date_of_birth"] == "1980-01-01"
        assert body["current_step"] == 1
        assert body["completed_steps"] == []
        assert body["status"] == "in_progress"

    def test_create_requires_name(self, client, mock_repo):
        response = client.post(f"{API}/sessions", json={"date_of_birth": "1980-01-01"})
        assert response.status_code == 422
        assert mock_repo.patients == {}

    def test_unknown_token_is_404(self, client):
        response = client.get(f"{API}/sessions/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"detail": "Resource not found"}


class TestQuestionnaireRoutes:
    def test_full_walkthrough(self, client):
        token = _create(client)["session_token"]
        for step, payload in STEP_PAYLOADS.items():
            response = client.post(
                f"{API}/sessions/{token}/questionnaires/{STEP_PATHS[step]}", json=payload,
            )
            assert response.status_code == 200, f"Step {step}: {response.text}"
            body = response.json()
            assert body["step"] == step
            assert body["next_step"] == min(step + 1, 5)
            assert body["completed"] is (step == 5)

        body = client.get(f"{API}/sessions/{token}").json()
        assert body["status"] == "completed"
        assert body["completed_steps"] == [1, 2, 3, 4, 5]

    def test_out_of_range_answer_is_422(self, client, mock_repo):
        token = _create(client)["session_token"]
        response = client.post(
            f"{API}/sessions/{token}/questionnaires/odi", json={**odi(), "sitting": 7},
        )
        assert response.status_code == 422
        assert mock_repo.response_inserts == 0

    def test_unknown_token_is_404_and_writes_nothing(self, client, mock_repo):
        response = client.post(f"{API}/sessions/bogus/questionnaires/odi", json=odi())
        assert response.status_code == 404
        assert mock_repo.response_inserts == 0


# =====================================================================
# Admin routes
# =====================================================================


class TestAdminRoutes:
    def test_stats(self, client):
        token = _create(client)["session_token"]
        _create(client)
        for step, payload in STEP_PAYLOADS.items():
            client.post(f"{API}/sessions/{token}/questionnaires/{STEP_PATHS[step]}", json=payload)

        response = client.get(f"{API}/admin/stats")
        assert response.status_code == 200
        assert response.json() == {
            "total_patients": 2,
            "completed_sessions": 1,
            "in_progress_sessions": 1,
            "today_patients": 2,
        }

    def test_patient_list_and_detail(self, client):
        created = _create(client)
        patients = client.get(f"{API}/admin/patients").json()
        assert [p["name"] for p in patients] == ["Jane Doe"]

        detail = client.get(f"{API}/admin/patients/{created['patient_id']}").json()
        assert detail["patient"]["name"] == "Jane Doe"
        assert detail["odi"] is None

    def test_patient_list_limit_bounds(self, client):
        assert client.get(f"{API}/admin/patients", params={"limit": 0}).status_code == 422

    def test_unknown_patient_is_404(self, client):
        assert client.get(f"{API}/admin/patients/42").status_code == 404

    def test_ifc_prefill_round(self, client, mock_repo):
        token = _create(client)["session_token"]
        for _ in range(2):
            response = client.put(f"{API}/admin/ifc/{token}", json=ifc_prefill())
            assert response.status_code == 200
            assert response.json() == {"success": True}
        assert mock_repo.response_inserts == 1

        template = client.get(f"{API}/admin/ifc/{token}").json()
        assert template["patient_name"] == "Jane Doe"
        assert template["quote_number"] == "Q-1001"


# =====================================================================
# Error mapping
# =====================================================================


class TestErrorMapping:
    def test_storage_error_is_503(self, client, mock_repo):
        mock_repo.create_patient = AsyncMock(side_effect=SQLAlchemyError("connection lost"))
        response = client.post(f"{API}/sessions", json=JANE)
        assert response.status_code == 503
        assert "connection lost" not in response.text, "Internal detail must not leak"

    def test_storage_failure_is_503(self, client, mock_repo):
        mock_repo.get_by_token = AsyncMock(side_effect=StorageFailure("boom"))
        assert client.get(f"{API}/sessions/x").status_code == 503

    def test_plain_value_error_is_400(self, client, mock_repo):
        mock_repo.get_by_token = AsyncMock(side_effect=ValueError("bad"))
        assert client.get(f"{API}/sessions/x").status_code == 400

    def test_unexpected_error_is_500(self, app, mock_repo):
        mock_repo.get_by_token = AsyncMock(side_effect=RuntimeError("kaboom"))
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get(f"{API}/sessions/x")
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}


# =====================================================================
# get_db transaction boundary
# =====================================================================


class _FakeFactory:
    """Mimics ``async_sessionmaker``: calling it opens an async context."""

    def __init__(self, session):
        self.session = session

    def __call__(self):
        return self

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture
def fake_session(monkeypatch):
    session = AsyncMock()
    monkeypatch.setattr(dependencies, "get_session_factory", lambda: _FakeFactory(session))
    return session


class TestGetDb:
    @pytest.mark.asyncio
    async def test_commits_on_success(self, fake_session):
        gen = get_db()
        assert await gen.__anext__() is fake_session
        with pytest.raises(StopAsyncIteration):
            await gen.__anext__()
        fake_session.commit.assert_awaited_once()
        fake_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, fake_session):
        gen = get_db()
        await gen.__anext__()
        with pytest.raises(RuntimeError):
            await gen.athrow(RuntimeError("step write failed"))
        fake_session.rollback.assert_awaited_once()
        fake_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_becomes_storage_failure(self, fake_session):
        fake_session.commit.side_effect = SQLAlchemyError("serialization failure")
        gen = get_db()
        await gen.__anext__()
        with pytest.raises(StorageFailure):
            await gen.__anext__()
        fake_session.rollback.assert_awaited_once()


class TestCommitFailureOverHttp:
    """A failed commit must reach the client as a 503, never a success body."""

    @pytest.fixture
    def real_db_client(self, workflow, admin, fake_session):
        app = create_app(ServerSettings())
        app.dependency_overrides[get_workflow] = lambda: workflow
        app.dependency_overrides[get_admin] = lambda: admin
        with TestClient(app) as client:
            yield client

    def test_create_session_commit_failure(self, real_db_client, fake_session):
        fake_session.commit.side_effect = SQLAlchemyError("disk full")
        response = real_db_client.post(f"{API}/sessions", json=JANE)
        assert response.status_code == 503, (
            f"Expected 503 on commit failure, got {response.status_code}: {response.text}"
        )
        assert "session_token" not in response.text
        fake_session.rollback.assert_awaited_once()

    def test_submission_commit_failure(self, real_db_client, fake_session):
        token = real_db_client.post(f"{API}/sessions", json=JANE).json()["session_token"]
        fake_session.commit.side_effect = SQLAlchemyError("disk full")
        response = real_db_client.post(
            f"{API}/sessions/{token}/questionnaires/odi", json=odi(),
        )
        assert response.status_code == 503
        assert "next_step" not in response.text

    def test_commit_happens_before_response(self, real_db_client, fake_session):
        response = real_db_client.post(f"{API}/sessions", json=JANE)
        assert response.status_code == 201
        fake_session.commit.assert_awaited_once()


class TestAdminListQuery:
    def test_status_and_search_params(self, client):
        done = _create(client, {**JANE, "hospital": "St Vincent's"})["session_token"]
        _create(client, {**JANE, "name": "John Smith"})
        for step, payload in STEP_PAYLOADS.items():
            client.post(f"{API}/sessions/{done}/questionnaires/{STEP_PATHS[step]}", json=payload)

        completed = client.get(f"{API}/admin/patients", params={"status": "completed"}).json()
        assert [p["name"] for p in completed] == ["Jane Doe"]
        found = client.get(f"{API}/admin/patients", params={"q": "vincent"}).json()
        assert [p["name"] for p in found] == ["Jane Doe"]

    def test_unknown_status_is_422(self, client):
        response = client.get(f"{API}/admin/patients", params={"status": "abandoned"})
        assert response.status_code == 422


# =====================================================================
# Health probe
# =====================================================================


class _FakeConnection:
    def __init__(self, fail):
        self.fail = fail

    async def __aenter__(self):
        if self.fail:
            raise OSError("connection refused")
        return AsyncMock()

    async def __aexit__(self, *exc_info):
        return False


class _FakeEngine:
    def __init__(self, fail=False):
        self.fail = fail

    def connect(self):
        return _FakeConnection(self.fail)


class TestHealth:
    def test_ok(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "get_engine", lambda: _FakeEngine())
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_database_down_is_503(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "get_engine", lambda: _FakeEngine(fail=True))
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "error"
