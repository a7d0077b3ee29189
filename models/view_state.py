from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum, auto

from utils.geometry import normalize_rotation


class EditorMode(Enum):
    """Mutually exclusive pointer modes of the viewer."""
    SELECT = auto()
    ADD_TEXT = auto()
    ERASE = auto()


@dataclass(frozen=True)
class ViewState:
    """
    Immutable zoom and rotation passed into every projection call.

    Rotation is the document-wide value written to the pages at bake time;
    the live view does not re-rotate page pixels.
    """

    zoom: float = 1.3
    rotation: int = 0

    MIN_ZOOM = 0.2
    MAX_ZOOM = 5.0
    ZOOM_STEP = 0.1

    def __post_init__(self):
        if not self.zoom > 0:
            raise ValueError(f"Zoom must be positive, got {self.zoom}")
        object.__setattr__(self, "rotation", normalize_rotation(self.rotation))

    def with_zoom(self, zoom: float) -> ViewState:
        """Create new ViewState with the zoom clamped to the supported range."""
        zoom = max(self.MIN_ZOOM, min(zoom, self.MAX_ZOOM))
        return replace(self, zoom=round(zoom, 4))

    def zoomed_in(self) -> ViewState:
        return self.with_zoom(self.zoom + self.ZOOM_STEP)

    def zoomed_out(self) -> ViewState:
        """Zooming out stops once the zoom is at or below the minimum."""
        if self.zoom <= self.MIN_ZOOM:
            return self
        return self.with_zoom(self.zoom - self.ZOOM_STEP)

    def with_rotation(self, rotation: int) -> ViewState:
        return replace(self, rotation=normalize_rotation(rotation))

    def rotated_left(self) -> ViewState:
        """Rotate counter-clockwise by 90 degrees."""
        return self.with_rotation(self.rotation - 90)

    def rotated_right(self) -> ViewState:
        """Rotate clockwise by 90 degrees."""
        return self.with_rotation(self.rotation + 90)

