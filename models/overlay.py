from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Tuple, Union
import uuid

from utils.geometry import PageRect, Point2D


class OverlayType(Enum):
    """Kinds of overlay records the viewer can hold."""
    HIGHLIGHT = auto()
    TEXT_BOX = auto()


@dataclass(frozen=True)
class Color:
    """Immutable RGB color representation."""

    red: int = 0
    green: int = 0
    blue: int = 0

    def to_hex(self) -> str:
        """Convert to hex string (#RRGGBB)."""
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    def to_unit_rgb(self) -> Tuple[float, float, float]:
        """Components scaled to 0..1, as PyMuPDF expects them."""
        return (self.red / 255, self.green / 255, self.blue / 255)


class ColorTag(Enum):
    """Highlight colors offered by the selection popup."""
    YELLOW = auto()
    GREEN = auto()
    BLUE = auto()
    PINK = auto()
    ORANGE = auto()

    @property
    def color(self) -> Color:
        return _TAG_COLORS[self]

    @property
    def label(self) -> str:
        return self.name.capitalize()


_TAG_COLORS = {
    ColorTag.YELLOW: Color(255, 235, 59),
    ColorTag.GREEN: Color(129, 199, 132),
    ColorTag.BLUE: Color(100, 181, 246),
    ColorTag.PINK: Color(240, 98, 146),
    ColorTag.ORANGE: Color(255, 167, 38),
}


def new_overlay_id() -> str:
    """Ids are shared by highlights and text boxes, so one generator serves both."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class HighlightOverlay:
    """A colored rectangle over selected text, in zoom-normalized page units."""

    page_index: int
    rect: PageRect
    color_tag: ColorTag = ColorTag.YELLOW
    source_text: str = ""
    id: str = field(default_factory=new_overlay_id)

    @property
    def overlay_type(self) -> OverlayType:
        return OverlayType.HIGHLIGHT


@dataclass(frozen=True)
class TextBoxOverlay:
    """A single line of text anchored at a zoom-normalized page point."""

    page_index: int
    position: Point2D
    content: str
    id: str = field(default_factory=new_overlay_id)

    def __post_init__(self):
        if not self.content:
            raise ValueError("Text box content must not be empty")

    @property
    def overlay_type(self) -> OverlayType:
        return OverlayType.TEXT_BOX


Overlay = Union[HighlightOverlay, TextBoxOverlay]
