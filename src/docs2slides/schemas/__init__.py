"""Bundled JSON Schemas for the content stream format."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

SCHEMA_DIR = Path(__file__).parent


def get_content_schema_path() -> Path:
    return SCHEMA_DIR / "content.schema.json"


@lru_cache(maxsize=None)
def load_content_schema() -> Dict[str, Any]:
    """Parsed content stream schema; read once per process."""
    with open(get_content_schema_path(), "r", encoding="utf-8") as f:
        return json.load(f)
