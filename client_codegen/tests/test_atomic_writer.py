"""
Tests for atomic artifact writes.
"""

import pytest

from client_codegen.errors import EmitError
from client_codegen.pipeline.emitter import AtomicWriter


def leftovers(directory):
    return [p.name for p in directory.iterdir() if p.name.endswith(".tmp")]


class TestAtomicWriter:
    def test_write_creates_parent_directories(self, tmp_path):
        path = tmp_path / "gen" / "http" / "storage" / "client" / "types.py"
        AtomicWriter().write(path, "x = 1\n", "python")

        assert path.read_text() == "x = 1\n"
        assert leftovers(path.parent) == []

    def test_invalid_python_is_not_written(self, tmp_path):
        path = tmp_path / "types.py"
        with pytest.raises(EmitError):
            AtomicWriter().write(path, "def broken(:\n", "python")

        assert not path.exists()
        assert leftovers(tmp_path) == []

    def test_invalid_python_keeps_previous_content(self, tmp_path):
        path = tmp_path / "types.py"
        path.write_text("x = 1\n")
        with pytest.raises(EmitError):
            AtomicWriter().write(path, "class\n", "python")
        assert path.read_text() == "x = 1\n"

    def test_validation_can_be_disabled(self, tmp_path):
        path = tmp_path / "types.py"
        AtomicWriter().write(path, "class\n", "python", validate=False)
        assert path.read_text() == "class\n"

    def test_go_package_clause(self, tmp_path):
        writer = AtomicWriter()
        writer.write(tmp_path / "ok.go", "package client\n\ntype A struct {\n}\n", "go")

        with pytest.raises(EmitError, match="package clause"):
            writer.write(tmp_path / "nopackage.go", "type A struct {\n}\n", "go")
        with pytest.raises(EmitError, match="unbalanced braces"):
            writer.write(tmp_path / "braces.go", "package client\n\ntype A struct {\n", "go")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["ok.go"]

    def test_unknown_language(self, tmp_path):
        with pytest.raises(EmitError):
            AtomicWriter().write(tmp_path / "types.rs", "", "rust")

    def test_custom_validator(self, tmp_path):
        seen = []
        AtomicWriter(validate_python=seen.append).write(tmp_path / "types.py", "x = 1\n", "python")
        assert seen == ["x = 1\n"]

    def test_write_if_not_exists(self, tmp_path):
        path = tmp_path / "types.py"
        writer = AtomicWriter()

        assert writer.write_if_not_exists(path, "x = 1\n", "python")
        with pytest.raises(FileExistsError, match="already exists"):
            writer.write_if_not_exists(path, "x = 2\n", "python")
        assert path.read_text() == "x = 1\n"
