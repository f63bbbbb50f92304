"""Tests for strudelshelf init."""

from __future__ import annotations

import stat
from pathlib import Path

import yaml
from typer.testing import CliRunner

from strudelshelf.cli.main import app
from strudelshelf.db.connection import Database
from strudelshelf.db.schema import CURRENT_VERSION

runner = CliRunner()


def _invoke(project: Path, global_cfg: Path):
    return runner.invoke(app, ["init", str(project), "--global-config", str(global_cfg)])


def test_init_creates_db_and_configs(tmp_path: Path) -> None:
    project = tmp_path / "proj"
    global_cfg = tmp_path / "home" / "config.yaml"

    result = _invoke(project, global_cfg)
    assert result.exit_code == 0, result.output

    db_path = project / ".strudelshelf.db"
    assert db_path.exists()
    with Database(db_path) as conn:
        version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    assert version == CURRENT_VERSION

    data = yaml.safe_load((project / "strudelshelf.yaml").read_text())
    assert data["catalog"]["db"] == ".strudelshelf.db"
    assert data["search"]["source"] == "all"

    assert global_cfg.exists()
    assert stat.S_IMODE(global_cfg.stat().st_mode) == 0o600


def test_init_is_idempotent(tmp_path: Path) -> None:
    project = tmp_path / "proj"
    global_cfg = tmp_path / "home" / "config.yaml"
    _invoke(project, global_cfg)
    (project / "strudelshelf.yaml").write_text("search:\n  limit: 5\n")

    result = _invoke(project, global_cfg)
    assert result.exit_code == 0, result.output
    output = " ".join(result.output.split())
    assert "already exists" in output
    assert "left unchanged" in output
    assert (project / "strudelshelf.yaml").read_text() == "search:\n  limit: 5\n"


def test_init_config_never_contains_token(tmp_path: Path) -> None:
    project = tmp_path / "proj"
    global_cfg = tmp_path / "home" / "config.yaml"
    _invoke(project, global_cfg)
    for path in (project / "strudelshelf.yaml", global_cfg):
        data = yaml.safe_load(path.read_text())
        assert "token" not in str(data).lower()
