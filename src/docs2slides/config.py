"""
Conversion Configuration

Tunable knobs for extraction, section detection, pagination and layout.
Loaded from YAML or JSON; every field has a default so an empty file is valid.
"""

import json
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_SECTION_KEYWORDS = [
    "Section",
    "Chapter",
    "Part",
    "Chapitre",
    "Partie",
    "Kapitel",
    "Teil",
    "Capítulo",
    "Sección",
    "Parte",
    "Capitolo",
]


class PaginationConfig(BaseModel):
    """Word and line ceilings for one slide chunk."""
    max_words_per_chunk: int = Field(300, gt=0)
    max_lines_per_chunk: int = Field(8, gt=0)
    continuation_prefix: str = "(Continued)"
    # Title-only divider slide ahead of every section
    section_title_slides: bool = False


class LayoutConfig(BaseModel):
    """Font tiers, thresholds and geometry, all in points."""
    title_length_threshold: int = 50
    title_font_default: float = 32.0
    title_font_small: float = 24.0

    body_medium_threshold: int = 500
    body_small_threshold: int = 800
    body_font_default: float = 18.0
    body_font_medium: float = 14.0
    body_font_small: float = 12.0

    table_font: float = 12.0

    image_offset_x: float = 100.0
    image_offset_y: float = 100.0

    slide_width: float = 720.0
    slide_height: float = 540.0
    margin: float = 36.0


class SectionConfig(BaseModel):
    """Heading detection for documents without explicit tabs."""
    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_SECTION_KEYWORDS))
    # Overrides the keyword pattern. Named groups 'keyword' and 'number'
    # produce "<keyword> <number>" titles.
    pattern: Optional[str] = None
    default_title: str = "Main Content"
    generic_title: str = "Section {index}"

    @field_validator("keywords")
    @classmethod
    def strip_keywords(cls, v: List[str]) -> List[str]:
        return [k.strip() for k in v if k and k.strip()]


class ConversionConfig(BaseModel):
    """Top-level configuration for one conversion run."""
    default_title: str = "Converted Document"
    timestamp_title: bool = True
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    sections: SectionConfig = Field(default_factory=SectionConfig)


# ============================================================
# LOADING / SAVING
# ============================================================

def load_config(path: Optional[Union[str, Path]] = None) -> ConversionConfig:
    """Load configuration from a YAML or JSON file.

    Args:
        path: Config file path. None returns the defaults.

    Returns:
        ConversionConfig
    """
    if path is None:
        return ConversionConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return ConversionConfig(**(data or {}))


def save_config(config: ConversionConfig, path: Union[str, Path]) -> None:
    """Save configuration as YAML or JSON depending on the file suffix."""
    path = Path(path)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)


def create_minimal_config(
    max_words: int = 300,
    max_lines: int = 8,
    keywords: Optional[List[str]] = None,
) -> ConversionConfig:
    """Build a config overriding only the most commonly tuned values."""
    sections = SectionConfig(keywords=keywords) if keywords else SectionConfig()
    return ConversionConfig(
        pagination=PaginationConfig(max_words_per_chunk=max_words, max_lines_per_chunk=max_lines),
        sections=sections,
    )
