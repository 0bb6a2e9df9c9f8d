"""
Tests for document loading.
"""

from __future__ import annotations

import json
import logging

import pytest

from openapi_model_generator import load_document
from openapi_model_generator.pipeline.errors import DocumentLoadError

YAML_DOCUMENT = """
openapi: 3.0.3
info:
  title: Petstore
  version: "1.0"
components:
  schemas:
    Pet:
      type: object
      properties:
        name:
          type: string
"""


class TestLoadDocument:
    """Test YAML and JSON loading"""

    def test_yaml(self, tmp_path):
        path = tmp_path / "petstore.yaml"
        path.write_text(YAML_DOCUMENT)

        document = load_document(path)

        assert document["openapi"] == "3.0.3"
        assert document["components"]["schemas"]["Pet"]["properties"]["name"] == {"type": "string"}

    def test_yml_suffix(self, tmp_path):
        path = tmp_path / "petstore.yml"
        path.write_text(YAML_DOCUMENT)

        assert "components" in load_document(str(path))

    def test_json(self, tmp_path):
        path = tmp_path / "petstore.json"
        path.write_text(json.dumps({"openapi": "3.0.3", "paths": {}}))

        assert load_document(path) == {"openapi": "3.0.3", "paths": {}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError, match="Cannot read"):
            load_document(tmp_path / "missing.yaml")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(DocumentLoadError, match="Cannot parse"):
            load_document(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("openapi: [3.0.3\n")

        with pytest.raises(DocumentLoadError, match="Cannot parse"):
            load_document(path)

    def test_top_level_must_be_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(DocumentLoadError, match="mapping"):
            load_document(path)

    def test_warns_on_unsupported_version(self, tmp_path, caplog):
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0"}))

        with caplog.at_level(logging.WARNING, logger="openapi_model_generator.loader"):
            load_document(path)

        assert "no 'openapi' version field" in caplog.text

    def test_warns_on_openapi_2(self, tmp_path, caplog):
        path = tmp_path / "old.json"
        path.write_text(json.dumps({"openapi": "2.0"}))

        with caplog.at_level(logging.WARNING, logger="openapi_model_generator.loader"):
            load_document(path)

        assert "only 3.x is supported" in caplog.text
