"""
Slide Layout Assignment

Chooses a layout archetype and font sizes for each slide chunk. Layout is a
pure function of chunk shape: tables and images go on blank slides, text
goes on title-and-body slides with font tiers picked by text length.

Recipes are built from the LayoutConfig slide size and margin, so table and
image placement follows the configured geometry.

All dimensions are in points (1 inch = 72 pt).
Standard slide: 10" x 7.5" (720 x 540 pt).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .config import LayoutConfig
from .paginate import ChunkKind, SlideChunk


class LayoutArchetype(str, Enum):
    TITLE_AND_BODY = "TITLE_AND_BODY"
    BLANK = "BLANK"


# ============================================================
# DATA CLASSES
# ============================================================

@dataclass
class BoxPosition:
    """Position and size in points."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class LayoutRecipe:
    """A layout archetype and the region its content is placed in.

    Title-and-body recipes leave placement to the template placeholders and
    carry no content box.
    """
    name: str
    archetype: LayoutArchetype
    description: str = ""
    content_box: Optional[BoxPosition] = None


@dataclass
class LayoutDecision:
    """Layout and style parameters chosen for one chunk."""
    recipe: str
    archetype: LayoutArchetype
    title_font_pt: Optional[float] = None
    body_font_pt: Optional[float] = None
    table_rows: int = 0
    table_columns: int = 0
    cell_font_pt: Optional[float] = None
    table_box: Optional[BoxPosition] = None
    image_box: Optional[BoxPosition] = None


# ============================================================
# BUILT-IN RECIPES
# ============================================================

def build_recipes(config: Optional[LayoutConfig] = None) -> Dict[str, LayoutRecipe]:
    """Build the three built-in recipes for a slide size."""
    config = config or LayoutConfig()
    margin = config.margin
    content_box = BoxPosition(
        x=margin,
        y=margin,
        width=max(config.slide_width - 2 * margin, 1.0),
        height=max(config.slide_height - 2 * margin, 1.0),
    )

    recipes: Dict[str, LayoutRecipe] = {}

    recipes["title_and_body"] = LayoutRecipe(
        name="title_and_body",
        archetype=LayoutArchetype.TITLE_AND_BODY,
        description="Section title over a text body",
    )

    recipes["blank_table"] = LayoutRecipe(
        name="blank_table",
        archetype=LayoutArchetype.BLANK,
        description="Blank slide carrying one table",
        content_box=content_box,
    )

    recipes["blank_image"] = LayoutRecipe(
        name="blank_image",
        archetype=LayoutArchetype.BLANK,
        description="Blank slide carrying one image",
        content_box=content_box,
    )

    return recipes


# Global recipe registry for the default slide size
COOKBOOK: Dict[str, LayoutRecipe] = build_recipes()


def get_recipe(name: str) -> Optional[LayoutRecipe]:
    """Get a layout recipe by name. Returns None if not found."""
    return COOKBOOK.get(name)


def list_recipes() -> List[str]:
    """Return all registered recipe names."""
    return list(COOKBOOK.keys())


# ============================================================
# ASSIGNMENT
# ============================================================

class LayoutAssigner:
    """Pick a recipe and font sizes for a chunk."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.recipes = build_recipes(self.config)

    def assign(self, chunk: SlideChunk) -> LayoutDecision:
        if chunk.kind == ChunkKind.TABLE:
            return self._table(chunk)
        if chunk.kind == ChunkKind.IMAGE:
            return self._image(chunk)
        return self._text(chunk)

    def title_font(self, title: str) -> float:
        if len(title) > self.config.title_length_threshold:
            return self.config.title_font_small
        return self.config.title_font_default

    def body_font(self, body: str) -> float:
        length = len(body)
        if length > self.config.body_small_threshold:
            return self.config.body_font_small
        if length > self.config.body_medium_threshold:
            return self.config.body_font_medium
        return self.config.body_font_default

    def _text(self, chunk: SlideChunk) -> LayoutDecision:
        recipe = self.recipes["title_and_body"]
        return LayoutDecision(
            recipe=recipe.name,
            archetype=recipe.archetype,
            title_font_pt=self.title_font(chunk.title),
            body_font_pt=self.body_font(chunk.body),
        )

    def _table(self, chunk: SlideChunk) -> LayoutDecision:
        recipe = self.recipes["blank_table"]
        element = chunk.element
        return LayoutDecision(
            recipe=recipe.name,
            archetype=recipe.archetype,
            table_rows=element.row_count if element is not None else 0,
            table_columns=element.column_count if element is not None else 0,
            cell_font_pt=self.config.table_font,
            table_box=recipe.content_box,
        )

    def _image(self, chunk: SlideChunk) -> LayoutDecision:
        recipe = self.recipes["blank_image"]
        return LayoutDecision(
            recipe=recipe.name,
            archetype=recipe.archetype,
            image_box=self.image_box(chunk, recipe.content_box),
        )

    def image_box(self, chunk: SlideChunk, bounds: Optional[BoxPosition] = None) -> BoxPosition:
        """Place the image at the fixed offset, honoring source dimensions.

        Width and height of 0 mean "native size" to the writer. Explicit
        dimensions are scaled down, keeping the aspect ratio, only when they
        would run past the right or bottom edge of bounds.
        """
        cfg = self.config
        bounds = bounds or self.recipes["blank_image"].content_box
        x, y = cfg.image_offset_x, cfg.image_offset_y
        element = chunk.element
        if element is None or not element.width or not element.height:
            return BoxPosition(x=x, y=y, width=0.0, height=0.0)

        width, height = element.width, element.height
        max_width = max(bounds.right - x, 1.0)
        max_height = max(bounds.bottom - y, 1.0)
        scale = min(1.0, max_width / width, max_height / height)
        return BoxPosition(x=x, y=y, width=width * scale, height=height * scale)


def assign_layout(chunk: SlideChunk, config: Optional[LayoutConfig] = None) -> LayoutDecision:
    """Convenience wrapper around LayoutAssigner.assign."""
    return LayoutAssigner(config).assign(chunk)
