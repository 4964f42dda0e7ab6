"""
Tests for the client_codegen command.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from client_codegen.client_codegen import client_codegen

STORAGE = str(Path(__file__).parent / "test_data" / "schemas" / "storage.json")


@pytest.fixture
def run():
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(client_codegen, [str(a) for a in args])

    return invoke


def test_generates_one_artifact_per_service(run, tmp_path):
    result = run(STORAGE, tmp_path)

    assert result.exit_code == 0, result.output
    assert (tmp_path / "gen/http/storage/client/types.py").exists()
    assert (tmp_path / "gen/http/sommelier/client/types.py").exists()
    assert "storage: " in result.output


def test_generated_file_carries_the_command_line(run, tmp_path):
    run(STORAGE, tmp_path, "--scope", "run")
    text = (tmp_path / "gen/http/storage/client/types.py").read_text()

    assert text.startswith("# Code generated by client_codegen, DO NOT EDIT.\n")
    assert f"# client_codegen storage.json {tmp_path.name} --scope run\n" in text


def test_existing_files_are_kept_without_force(run, tmp_path):
    assert run(STORAGE, tmp_path).exit_code == 0
    target = tmp_path / "gen/http/storage/client/types.py"
    target.write_text("# edited\n")

    result = run(STORAGE, tmp_path)
    assert result.exit_code == 1
    assert "already exists" in result.output
    assert target.read_text() == "# edited\n"

    result = run(STORAGE, tmp_path, "--force")
    assert result.exit_code == 0, result.output
    assert target.read_text() != "# edited\n"


def test_go_output(run, tmp_path):
    result = run(STORAGE, tmp_path, "--language", "go", "--package", "example.com/wine/gen")

    assert result.exit_code == 0, result.output
    text = (tmp_path / "gen/http/storage/client/types.go").read_text()
    assert "\npackage client\n" in text


def test_config_file(run, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"language": "go", "output_root": "client", "max_workers": 1}))

    result = run(STORAGE, tmp_path / "out", "--config", config)

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out/client/http/storage/client/types.go").exists()


def test_flags_override_config_file(run, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"language": "go"}))

    result = run(STORAGE, tmp_path / "out", "--config", config, "--language", "python")

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out/gen/http/storage/client/types.py").exists()


def test_invalid_json(run, tmp_path):
    schema = tmp_path / "broken.json"
    schema.write_text("{not json")

    result = run(schema, tmp_path / "out")
    assert result.exit_code == 1
    assert "Cannot load" in result.output


def test_malformed_description(run, tmp_path):
    schema = tmp_path / "list.json"
    schema.write_text("[]")

    result = run(schema, tmp_path / "out")
    assert result.exit_code == 1
    assert "must be a JSON object" in result.output


def test_failed_service_does_not_stop_the_run(run, tmp_path):
    with open(STORAGE) as f:
        data = json.load(f)
    data["services"].insert(0, {"name": "broken", "endpoints": [{"name": "get", "result": {"type": "Missing"}}]})
    schema = tmp_path / "schema.json"
    schema.write_text(json.dumps(data))

    result = run(schema, tmp_path / "out")

    assert result.exit_code == 1
    assert "FAILED broken" in result.output
    assert (tmp_path / "out/gen/http/storage/client/types.py").exists()
    assert (tmp_path / "out/gen/http/sommelier/client/types.py").exists()
    assert not (tmp_path / "out/gen/http/broken").exists()
