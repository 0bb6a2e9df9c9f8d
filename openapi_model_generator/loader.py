"""
Document loader.

Reads an OpenAPI document from a YAML or JSON file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from .pipeline.errors import DocumentLoadError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(path: str | Path) -> dict[str, Any]:
    """
    Load an OpenAPI document.

    Files ending in .yaml/.yml are read as YAML, anything else as JSON.

    Raises:
        DocumentLoadError: If the file cannot be read or decoded, or is not a mapping
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            document = yaml.safe_load(text)
        else:
            document = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise DocumentLoadError(f"Cannot parse {path}: {e}") from e

    if not isinstance(document, dict):
        raise DocumentLoadError(f"{path} does not contain a mapping at the top level")

    version = document.get("openapi")
    if version is None:
        logger.warning("%s has no 'openapi' version field", path)
    elif not str(version).startswith("3."):
        logger.warning("%s declares OpenAPI %s; only 3.x is supported", path, version)

    logger.debug("Loaded %s", path)
    return document
