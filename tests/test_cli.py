import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from console.cli import app
from console.config import PASSWORD_ENV_VAR
from store import open_store

runner = CliRunner()

FAST = ["--iterations", "1000"]


@pytest.fixture(autouse=True)
def no_env_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(PASSWORD_ENV_VAR, raising=False)


def test_cli_crud_plain(tmp_path: Path) -> None:
    path = tmp_path / "db.json"

    result = runner.invoke(app, ["init", str(path)])
    assert result.exit_code == 0
    assert path.exists()

    result = runner.invoke(app, ["insert", str(path), '{"name": "Alice", "age": 25}'])
    assert result.exit_code == 0
    alice = json.loads(result.stdout)
    assert alice["name"] == "Alice"
    doc_id = alice["id"]

    result = runner.invoke(app, ["find", str(path), "--where", "name=Alice", "--where", "age=25"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [alice]

    result = runner.invoke(app, ["find", str(path), "--where", "age=\"25\""])
    assert json.loads(result.stdout) == []

    result = runner.invoke(app, ["update", str(path), str(doc_id), '{"age": 26}'])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"id": doc_id, "name": "Alice", "age": 26}

    result = runner.invoke(app, ["delete", str(path), str(doc_id)])
    assert result.exit_code == 0

    result = runner.invoke(app, ["find", str(path)])
    assert json.loads(result.stdout) == []


def test_cli_find_with_json_query(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    runner.invoke(app, ["insert", str(path), '{"name": "Alice", "admin": true}'])
    runner.invoke(app, ["insert", str(path), '{"name": "Bob", "admin": false}'])

    result = runner.invoke(app, ["find", str(path), "--query", '{"admin": true}'])
    assert result.exit_code == 0
    assert [doc["name"] for doc in json.loads(result.stdout)] == ["Alice"]


def test_cli_encrypted_store(tmp_path: Path) -> None:
    path = tmp_path / "db.enc"
    result = runner.invoke(
        app, ["--password", "pw", *FAST, "insert", str(path), '{"name": "Alice"}']
    )
    assert result.exit_code == 0
    assert "Alice" not in path.read_text(encoding="ascii")

    result = runner.invoke(app, ["--password", "wrong", *FAST, "find", str(path)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["--password", "pw", *FAST, "find", str(path)])
    assert result.exit_code == 0
    assert [doc["name"] for doc in json.loads(result.stdout)] == ["Alice"]


def test_cli_password_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "db.enc"
    monkeypatch.setenv(PASSWORD_ENV_VAR, "env-pw")
    result = runner.invoke(app, [*FAST, "insert", str(path), '{"name": "Alice"}'])
    assert result.exit_code == 0
    assert open_store(path, password="env-pw", iterations=1000).find()[0]["name"] == "Alice"


def test_cli_config_file(tmp_path: Path) -> None:
    path = tmp_path / "db.enc"
    config_path = tmp_path / "store.yaml"
    config_path.write_text(yaml.dump({"password": "pw", "iterations": 1000}), encoding="utf-8")

    result = runner.invoke(app, ["--config", str(config_path), "insert", str(path), '{"a": 1}'])
    assert result.exit_code == 0
    assert open_store(path, password="pw", iterations=1000).find()[0]["a"] == 1

    result = runner.invoke(app, ["--config", str(config_path), "show-config"])
    assert result.exit_code == 0
    assert "pw" not in result.stdout
    assert json.loads(result.stdout)["encrypted"] is True


def test_cli_change_password(tmp_path: Path) -> None:
    path = tmp_path / "db.enc"
    runner.invoke(app, ["--password", "old", *FAST, "insert", str(path), '{"name": "Alice"}'])

    result = runner.invoke(
        app, [*FAST, "change-password", str(path), "--old", "wrong", "--new", "new"]
    )
    assert result.exit_code == 1
    assert open_store(path, password="old", iterations=1000).find()[0]["name"] == "Alice"

    result = runner.invoke(app, [*FAST, "change-password", str(path), "--old", "old", "--new", "new"])
    assert result.exit_code == 0
    assert open_store(path, password="new", iterations=1000).find()[0]["name"] == "Alice"


def test_cli_change_password_prompts(tmp_path: Path) -> None:
    path = tmp_path / "db.enc"
    runner.invoke(app, ["--password", "old", *FAST, "insert", str(path), '{"name": "Alice"}'])

    result = runner.invoke(app, [*FAST, "change-password", str(path)], input="old\nnew\nnew\n")
    assert result.exit_code == 0
    assert open_store(path, password="new", iterations=1000).find()[0]["name"] == "Alice"


def test_cli_update_missing_document(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    result = runner.invoke(app, ["update", str(path), "42", '{"a": 1}'])
    assert result.exit_code == 1


def test_cli_delete_missing_document(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    result = runner.invoke(app, ["delete", str(path), "42"])
    assert result.exit_code == 1


@pytest.mark.parametrize("payload", ["not json", "[1, 2]"])
def test_cli_rejects_bad_documents(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "db.json"
    result = runner.invoke(app, ["insert", str(path), payload])
    assert result.exit_code == 1
    assert not path.exists()


def test_cli_invalid_config_option(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--digest", "md5", "init", str(tmp_path / "db.json")])
    assert result.exit_code == 1


def test_cli_change_password_requires_existing_store(tmp_path: Path) -> None:
    path = tmp_path / "missing.db"
    result = runner.invoke(app, [*FAST, "change-password", str(path), "--old", "a", "--new", "b"])
    assert result.exit_code == 1
    assert not path.exists()


def test_cli_save_config(tmp_path: Path) -> None:
    output = tmp_path / "saved.yaml"
    result = runner.invoke(
        app, ["--password", "pw", "--iterations", "2000", "--digest", "sha512", "save-config", str(output)]
    )
    assert result.exit_code == 0
    data = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert "password" not in data
    assert data["iterations"] == 2000
    assert data["digest"] == "sha512"
