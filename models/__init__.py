from models.overlay import (
    OverlayType,
    Color,
    ColorTag,
    HighlightOverlay,
    TextBoxOverlay,
    Overlay,
)
from models.view_state import (
    EditorMode,
    ViewState,
)
from models.settings import (
    AppSettings,
    ViewerSettings,
    AnnotationSettings,
)

__all__ = [
    "OverlayType",
    "Color",
    "ColorTag",
    "HighlightOverlay",
    "TextBoxOverlay",
    "Overlay",
    "EditorMode",
    "ViewState",
    "AppSettings",
    "ViewerSettings",
    "AnnotationSettings",
]
