from __future__ import annotations

from models.overlay import ColorTag
from models.settings import AnnotationSettings, ViewerSettings


def test_annotation_settings_restore_from_saved_values() -> None:
    saved = AnnotationSettings(default_highlight_color=ColorTag.PINK, highlight_opacity=0.3).to_dict()

    restored = AnnotationSettings.from_dict(saved)

    assert restored.default_highlight_color == ColorTag.PINK
    assert restored.highlight_opacity == 0.3
    assert restored.output_file_name == "annotated.pdf"


def test_missing_keys_fall_back_to_defaults() -> None:
    assert ViewerSettings.from_dict({}) == ViewerSettings()
    assert AnnotationSettings.from_dict({}) == AnnotationSettings()
