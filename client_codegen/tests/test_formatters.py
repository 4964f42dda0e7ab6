"""
Tests for artifact formatters.
"""

import pytest

from client_codegen.pipeline.config import FormatterConfig
from client_codegen.pipeline.formatters import BlackFormatter, Formatter


class UpperFormatter(Formatter):
    LANGUAGE = "go"

    def __init__(self, available=True):
        self.available = available

    def format(self, code, config):
        return code.upper()

    def is_available(self):
        return self.available


def test_apply_formats_enabled_language():
    assert UpperFormatter().apply("package client\n", "go", FormatterConfig(enabled=True)) == "PACKAGE CLIENT\n"


def test_apply_leaves_text_unchanged():
    text = "package client\n"
    assert UpperFormatter().apply(text, "go", FormatterConfig(enabled=False)) == text
    assert UpperFormatter().apply(text, "python", FormatterConfig(enabled=True)) == text
    assert UpperFormatter(available=False).apply(text, "go", FormatterConfig(enabled=True)) == text


def test_black_formats_python_artifacts():
    pytest.importorskip("black")
    formatter = BlackFormatter()
    config = FormatterConfig(enabled=True)

    assert formatter.apply("x = {'a':1}\n", "python", config) == 'x = {"a": 1}\n'
    assert formatter.apply("x = {'a':1}\n", "go", config) == "x = {'a':1}\n"
