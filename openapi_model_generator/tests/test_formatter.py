"""
Tests for the rustfmt formatter.
"""

from __future__ import annotations

import logging
import subprocess

import pytest

from openapi_model_generator.pipeline import CodeGeneratorConfig, FormatterConfig, PipelineGenerator
from openapi_model_generator.pipeline.formatters import RustfmtFormatter

CODE = "pub struct Pet{pub name:String}\n"


def completed(returncode, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestRustfmtFormatter:
    def test_missing_executable_leaves_code_unchanged(self, caplog):
        formatter = RustfmtFormatter(executable="rustfmt-does-not-exist")

        with caplog.at_level(logging.WARNING):
            assert formatter.format(CODE, FormatterConfig(enabled=True)) == CODE

        assert not formatter.is_available()
        assert "rustfmt-does-not-exist not found" in caplog.text

    def test_formatted_output_is_returned(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            if "--version" in cmd:
                return completed(0, "rustfmt 1.7.0")
            return completed(0, "pub struct Pet {\n    pub name: String,\n}\n")

        monkeypatch.setattr(subprocess, "run", fake_run)

        formatted = RustfmtFormatter().format(CODE, FormatterConfig(enabled=True, edition="2018"))

        assert formatted == "pub struct Pet {\n    pub name: String,\n}\n"
        assert calls[-1] == ["rustfmt", "--emit", "stdout", "--quiet", "--edition", "2018"]

    def test_failure_keeps_original(self, monkeypatch, caplog):
        def fake_run(cmd, **kwargs):
            if "--version" in cmd:
                return completed(0)
            return completed(1, stderr="error: expected item")

        monkeypatch.setattr(subprocess, "run", fake_run)

        with caplog.at_level(logging.WARNING):
            assert RustfmtFormatter().format(CODE, FormatterConfig(enabled=True)) == CODE

        assert "expected item" in caplog.text

    @pytest.mark.parametrize("enabled", [True, False])
    def test_generator_uses_formatter_when_enabled(self, monkeypatch, enabled):
        calls = []

        def fake_run(cmd, input=None, **kwargs):
            calls.append(cmd)
            if "--version" in cmd:
                return completed(0)
            return completed(0, input.upper())

        monkeypatch.setattr(subprocess, "run", fake_run)
        config = CodeGeneratorConfig(add_generation_comment=False, formatter=FormatterConfig(enabled=enabled))

        files = PipelineGenerator({"openapi": "3.0.3"}, config).generate()

        if enabled:
            assert files["mod.rs"] == "PUB MOD MODELS;\n"
        else:
            assert files["mod.rs"] == "pub mod models;\n"
            assert calls == []
