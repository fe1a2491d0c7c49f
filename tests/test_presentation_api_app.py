"""
Tests for FastAPI application factory and configuration.

This module exercises the assembled application end to end: pipeline
stages per environment, controller actions over mocked services, health
endpoints and storage error reporting.
"""

from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jatrackr.application.container import Container
from jatrackr.application.startup import ApplicationStartup
from jatrackr.core.domain.models import JobData, User
from jatrackr.core.interfaces.services import IJobDataService, IUserService
from jatrackr.infrastructure.config.database import DatabaseSettings, resolve_database_settings
from jatrackr.infrastructure.config.models import ApplicationConfig, ServerConfig
from jatrackr.presentation.api.app import create_app, create_app_from_environment
from jatrackr.presentation.api.middleware import (
    ApiDocumentationMiddleware,
    ErrorHandlerMiddleware,
    HSTSMiddleware,
    HTTPSRedirectionMiddleware,
    StaticFilesMiddleware,
)
from jatrackr.presentation.api.pipeline import PipelineStage

DATABASE_VARIABLES = ("MONGODB_CS", "MONGODB_DB_NAME", "MONGODB_USER_COLLECTION", "MONGODB_JOBDATA_COLLECTION")


def make_config(environment: str, web_root: Path) -> ApplicationConfig:
    return ApplicationConfig(environment=environment, server=ServerConfig(web_root=str(web_root)))


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    root = tmp_path / "wwwroot"
    root.mkdir()
    (root / "index.html").write_text("<html>JobAppTrackr</html>", encoding="utf-8")
    (root / "app.js").write_text("console.log('app')", encoding="utf-8")
    return root


class TestCreateApp:
    """Test cases for create_app."""

    def setup_method(self) -> None:
        self.container = Container()

    def test_create_app_basic(self, web_root: Path) -> None:
        config = make_config("Production", web_root)

        app = create_app(self.container, config)

        assert isinstance(app, FastAPI)
        assert app.title == "User Management API"
        assert app.version == "v1"
        assert app.state.container is self.container
        assert app.state.config is config
        assert app.docs_url is None

    def test_create_app_debug_mode(self, web_root: Path) -> None:
        config = make_config("Production", web_root)
        config.debug = True

        assert create_app(self.container, config).debug is True

    def test_pipeline_recorded_on_state(self, web_root: Path) -> None:
        app = create_app(self.container, make_config("Development", web_root))

        assert app.state.pipeline[0].stage is PipelineStage.API_DOCUMENTATION

    def test_production_sends_hsts_over_https(self, web_root: Path) -> None:
        app = create_app(self.container, make_config("Production", web_root))
        client = TestClient(app, base_url="https://jatrackr.example.com")

        response = client.get("/health")

        assert response.status_code == 200
        assert response.headers["Strict-Transport-Security"] == "max-age=2592000"

    def test_production_has_no_documentation(self, web_root: Path) -> None:
        client = TestClient(create_app(self.container, make_config("Production", web_root)))

        assert client.get("/swagger/v1/swagger.json").status_code == 404
        assert "JobAppTrackr" in client.get("/").text

    def test_development_serves_documentation(self, web_root: Path) -> None:
        app = create_app(self.container, make_config("Development", web_root))
        client = TestClient(app, base_url="https://jatrackr.example.com")

        ui = client.get("/")
        document = client.get("/swagger/v1/swagger.json")

        assert ui.status_code == 200
        assert "swagger-ui" in ui.text
        assert "Strict-Transport-Security" not in ui.headers
        assert document.json()["info"]["title"] == "User Management API"
        assert "/health" in document.json()["paths"]

    def test_other_environment_has_neither(self, web_root: Path) -> None:
        client = TestClient(create_app(self.container, make_config("Staging", web_root)),
                            base_url="https://jatrackr.example.com")

        response = client.get("/")

        assert "swagger-ui" not in response.text
        assert "Strict-Transport-Security" not in response.headers

    def test_static_files_and_fallback(self, web_root: Path) -> None:
        client = TestClient(create_app(self.container, make_config("Production", web_root)))

        assert client.get("/app.js").text == "console.log('app')"
        assert "JobAppTrackr" in client.get("/applications/42").text
        assert client.get("/missing.css").status_code == 404

    def test_storage_health_without_registered_store(self, web_root: Path) -> None:
        client = TestClient(create_app(self.container, make_config("Production", web_root)))

        response = client.get("/health/storage")

        assert response.status_code == 503
        assert response.json()["detail"] == "MongoStore is not available"

    def test_https_redirection_when_port_configured(self, web_root: Path) -> None:
        config = make_config("Production", web_root)
        config.server.https_port = 5001
        client = TestClient(create_app(self.container, config), follow_redirects=False)

        response = client.get("/health")

        assert response.status_code == 307
        assert response.headers["location"] == "https://testserver:5001/health"

    def test_development_documentation_ahead_of_redirection(self, web_root: Path) -> None:
        config = make_config("Development", web_root)
        config.server.https_port = 5001
        client = TestClient(create_app(self.container, config), follow_redirects=False)

        ui = client.get("/")

        assert ui.status_code == 200
        assert "swagger-ui" in ui.text
        assert client.get("/swagger/v1/swagger.json").status_code == 200
        assert client.get("/health").status_code == 307

    @pytest.mark.parametrize("environment, expected", [
        ("Development", [ErrorHandlerMiddleware, ApiDocumentationMiddleware,
                         HTTPSRedirectionMiddleware, StaticFilesMiddleware]),
        ("Production", [ErrorHandlerMiddleware, HSTSMiddleware,
                        HTTPSRedirectionMiddleware, StaticFilesMiddleware]),
    ])
    def test_middleware_follows_stage_order(self, web_root: Path, environment: str,
                                            expected: list) -> None:
        app = create_app(self.container, make_config(environment, web_root))

        assert [m.cls for m in app.user_middleware] == expected


class TestControllerActions:
    """Test cases for controller actions over mocked services."""

    def setup_method(self) -> None:
        self.users = AsyncMock(spec=IUserService)
        self.jobs = AsyncMock(spec=IJobDataService)
        container = Container()
        container.register_instance(IUserService, self.users)
        container.register_instance(IJobDataService, self.jobs)
        self.client = TestClient(create_app(container, ApplicationConfig(environment="Staging")))

    def test_list_users(self) -> None:
        self.users.list_users.return_value = [User(id="1", username="ada", email="ada@example.com")]

        response = self.client.get("/users")

        assert response.status_code == 200
        assert response.json()[0]["username"] == "ada"

    def test_user_details(self) -> None:
        self.users.get_user.return_value = User(id="1", username="ada", email="ada@example.com")

        response = self.client.get("/Users/Details/1")

        assert response.json()["id"] == "1"
        self.users.get_user.assert_awaited_once_with("1")

    def test_user_details_not_found(self) -> None:
        self.users.get_user.return_value = None

        assert self.client.get("/users/details/404").status_code == 404

    def test_user_details_requires_id(self) -> None:
        assert self.client.get("/users/details").status_code == 400

    def test_lookup_by_email(self) -> None:
        self.users.get_by_email.return_value = User(id="1", username="ada", email="ada@example.com")

        response = self.client.get("/users/byemail/ada@example.com")

        assert response.status_code == 200
        self.users.get_by_email.assert_awaited_once_with("ada@example.com")

    def test_create_user(self) -> None:
        self.users.get_by_username.return_value = None
        self.users.get_by_email.return_value = None
        self.users.create_user.side_effect = lambda user: user.model_copy(update={"id": "new"})

        response = self.client.post("/users/create", json={"username": "grace", "email": "grace@example.com"})

        assert response.status_code == 201
        assert response.headers["location"] == "/users/details/new"
        assert response.json()["username"] == "grace"

    def test_create_duplicate_username(self) -> None:
        self.users.get_by_username.return_value = User(id="1", username="grace", email="other@example.com")

        response = self.client.post("/users/create", json={"username": "grace", "email": "grace@example.com"})

        assert response.status_code == 409
        self.users.create_user.assert_not_awaited()

    def test_create_invalid_body(self) -> None:
        response = self.client.post("/users/create", json={"username": "grace"})

        assert response.status_code == 422

    def test_update_user(self) -> None:
        self.users.update_user.return_value = User(id="1", username="ada", email="new@example.com")

        response = self.client.put("/users/update/1", json={"email": "new@example.com"})

        assert response.json()["email"] == "new@example.com"
        changes = self.users.update_user.await_args.args[1]
        assert changes.model_dump(exclude_unset=True) == {"email": "new@example.com"}

    def test_delete_user(self) -> None:
        self.users.remove_user.return_value = True
        assert self.client.delete("/users/delete/1").status_code == 204

        self.users.remove_user.return_value = False
        assert self.client.delete("/users/delete/1").status_code == 404

    def test_wrong_method_is_not_allowed(self) -> None:
        assert self.client.post("/users/details/1").status_code == 405
        assert self.client.post("/health").status_code == 405

    def test_job_data_for_user(self) -> None:
        self.jobs.list_for_user.return_value = [
            JobData(id="j1", user_id="1", company="Acme", position="Engineer")
        ]

        response = self.client.get("/jobdata/foruser/1")

        assert response.json()[0]["status"] == "applied"
        self.jobs.list_for_user.assert_awaited_once_with("1")

    def test_create_job_data(self) -> None:
        self.jobs.create_job_data.side_effect = lambda job: job.model_copy(update={"id": "j2"})

        response = self.client.post("/jobdata/create", json={
            "user_id": "1", "company": "Initech", "position": "Analyst", "status": "interviewing"
        })

        assert response.status_code == 201
        assert response.headers["location"] == "/jobdata/details/j2"

    def test_unexpected_service_error_is_json(self) -> None:
        self.users.list_users.side_effect = RuntimeError("database exploded")

        response = self.client.get("/users")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"


class TestStorageConfiguration:
    """Test cases for requests made without database settings."""

    def _client(self, database: DatabaseSettings) -> TestClient:
        container = Container()
        startup = ApplicationStartup(container)
        config = ApplicationConfig(environment="Staging")
        startup.configure_services(config, database)
        return TestClient(create_app(container, config, startup))

    def test_storage_request_reports_missing_variables(self) -> None:
        with self._client(DatabaseSettings(database_name="trackr")) as client:
            response = client.get("/users")

        assert response.status_code == 503
        assert response.json() == {
            "error": "Storage not configured",
            "missing": ["MONGODB_CS", "MONGODB_USER_COLLECTION", "MONGODB_JOBDATA_COLLECTION"],
        }

    def test_health_reports_unconfigured_storage(self) -> None:
        with self._client(DatabaseSettings()) as client:
            overall = client.get("/health")
            storage = client.get("/health/storage")

        assert overall.json()["application"]["environment"] == "Staging"
        assert storage.json()["status"] == "unconfigured"


class TestCreateAppFromEnvironment:
    """Test cases for the full bootstrap without a .env file."""

    @pytest.fixture
    def environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Optional[Path]:
        monkeypatch.chdir(tmp_path)
        for key in DATABASE_VARIABLES:
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv("JATRACKR_ENVIRONMENT", "Development")
        monkeypatch.setenv("MONGODB_DB_NAME", "trackr")
        return tmp_path

    @patch("jatrackr.presentation.api.app.setup_logging")
    def test_development_bootstrap(self, mock_setup_logging, environment: Path) -> None:
        app = create_app_from_environment()
        container = app.state.container

        database = container.resolve(DatabaseSettings)
        assert database.database_name == "trackr"
        assert database.connection_string is None
        assert database == resolve_database_settings()
        mock_setup_logging.assert_called_once()

        with TestClient(app) as client:
            response = client.get("/")

        assert response.status_code == 200
        assert "swagger-ui" in response.text
        assert "Strict-Transport-Security" not in response.headers
