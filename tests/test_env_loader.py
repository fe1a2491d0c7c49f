"""
Tests for dotenv loading into the process environment.
"""

import os
from pathlib import Path
from typing import Dict

import pytest

from jatrackr.infrastructure.config.env_loader import default_env_path, load_env_file


class TestLoadEnvFile:
    """Test cases for load_env_file."""

    @pytest.fixture
    def env_file(self, tmp_path: Path) -> Path:
        path = tmp_path / ".env"
        path.write_text(
            "# database\n"
            "MONGODB_CS=mongodb://localhost:27017\n"
            "\n"
            "MONGODB_DB_NAME=trackr\n"
            "export MONGODB_USER_COLLECTION='users'\n"
            "MONGODB_JOBDATA_COLLECTION=\"jobs\"\n",
            encoding="utf-8"
        )
        return path

    def test_sets_all_keys_when_environment_is_empty(self, env_file: Path) -> None:
        environ: Dict[str, str] = {}

        applied = load_env_file(env_file, environ)

        assert environ == {
            "MONGODB_CS": "mongodb://localhost:27017",
            "MONGODB_DB_NAME": "trackr",
            "MONGODB_USER_COLLECTION": "users",
            "MONGODB_JOBDATA_COLLECTION": "jobs",
        }
        assert applied == environ

    def test_existing_variables_are_not_overridden(self, env_file: Path) -> None:
        environ = {"MONGODB_DB_NAME": "from-orchestrator"}

        applied = load_env_file(env_file, environ)

        assert environ["MONGODB_DB_NAME"] == "from-orchestrator"
        assert "MONGODB_DB_NAME" not in applied
        assert environ["MONGODB_CS"] == "mongodb://localhost:27017"

    def test_reloading_is_idempotent(self, env_file: Path) -> None:
        environ: Dict[str, str] = {}
        load_env_file(env_file, environ)
        snapshot = dict(environ)

        applied = load_env_file(env_file, environ)

        assert applied == {}
        assert environ == snapshot

    def test_missing_file_is_not_an_error(self, tmp_path: Path) -> None:
        environ = {"KEEP": "1"}

        applied = load_env_file(tmp_path / "absent.env", environ)

        assert applied == {}
        assert environ == {"KEEP": "1"}

    def test_malformed_lines_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text(
            "GOOD=1\n"
            "this line has no separator\n"
            "ALSO_GOOD=2\n",
            encoding="utf-8"
        )
        environ: Dict[str, str] = {}

        load_env_file(path, environ)

        assert environ == {"GOOD": "1", "ALSO_GOOD": "2"}

    def test_undecodable_lines_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_bytes(b"\xef\xbb\xbfGOOD=1\nBAD=\xff\xfe\nALSO_GOOD=2\n")
        environ: Dict[str, str] = {}

        applied = load_env_file(path, environ)

        assert applied == {"GOOD": "1", "ALSO_GOOD": "2"}
        assert environ == {"GOOD": "1", "ALSO_GOOD": "2"}

    def test_value_containing_equals_sign(self, tmp_path: Path) -> None:
        path = tmp_path / ".env"
        path.write_text("MONGODB_CS=mongodb://h/?retryWrites=true&w=majority\n", encoding="utf-8")
        environ: Dict[str, str] = {}

        load_env_file(path, environ)

        assert environ["MONGODB_CS"] == "mongodb://h/?retryWrites=true&w=majority"

    def test_defaults_to_process_environment(self, env_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(env_file.parent)
        # setenv + delenv makes monkeypatch remove the keys written by the loader
        for key in ("MONGODB_CS", "MONGODB_DB_NAME", "MONGODB_USER_COLLECTION", "MONGODB_JOBDATA_COLLECTION"):
            monkeypatch.setenv(key, "placeholder")
            monkeypatch.delenv(key)

        load_env_file()

        assert os.environ["MONGODB_DB_NAME"] == "trackr"

    def test_default_env_path_uses_working_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert default_env_path() == tmp_path / ".env"
