from pathlib import Path

import pytest

import config
from db import database


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[canvas]",
                "base_url = \"https://canvas.example.edu\"",
                "timeout = 5",
                "",
                "[canvas.accounts.ada]",
                "token_env = \"CANVAS_TOKEN_ADA\"",
                "",
                "[schedule]",
                "timezone = \"America/New_York\"",
                "",
                "[logging]",
                "level = \"DEBUG\"",
            ]
        ),
        encoding="utf-8",
    )


@pytest.fixture
def studyflow_home(tmp_path, monkeypatch):
    config_dir = tmp_path / ".studyflow"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "studyflow.db")
    for name in ("CANVAS_BASE_URL", "CANVAS_TIMEOUT", "SCHOOL_TIMEZONE", "STUDYFLOW_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    database.init_db()
    return config_dir


@pytest.fixture
def conn(studyflow_home):
    with database.get_conn() as connection:
        yield connection


@pytest.fixture
def student_id(conn):
    cursor = conn.cursor()
    cursor.execute("INSERT INTO students (name, canvas_account) VALUES (?, ?)", ("Ada", "ada"))
    conn.commit()
    return cursor.lastrowid
