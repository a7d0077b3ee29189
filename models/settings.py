from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any, List
import json
import logging

from PyQt6.QtCore import QSettings

from models.overlay import ColorTag

logger = logging.getLogger(__name__)


@dataclass
class ViewerSettings:
    """Settings for the PDF viewer."""

    default_zoom_level: float = 1.3
    page_spacing: int = 16
    page_label_height: int = 18
    visible_page_threshold: float = 0.5

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            "default_zoom_level": self.default_zoom_level,
            "page_spacing": self.page_spacing,
            "page_label_height": self.page_label_height,
            "visible_page_threshold": self.visible_page_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ViewerSettings:
        """Create settings from dictionary."""
        return cls(
            default_zoom_level=data.get("default_zoom_level", 1.3),
            page_spacing=data.get("page_spacing", 16),
            page_label_height=data.get("page_label_height", 18),
            visible_page_threshold=data.get("visible_page_threshold", 0.5),
        )


@dataclass
class AnnotationSettings:
    """Settings for highlights, text boxes and the exported document."""

    default_highlight_color: ColorTag = ColorTag.YELLOW
    highlight_opacity: float = 0.5
    text_font_size: float = 12.0
    text_font_name: str = "helv"
    output_file_name: str = "annotated.pdf"

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return {
            "default_highlight_color": self.default_highlight_color.name,
            "highlight_opacity": self.highlight_opacity,
            "text_font_size": self.text_font_size,
            "text_font_name": self.text_font_name,
            "output_file_name": self.output_file_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AnnotationSettings:
        """Create settings from dictionary."""
        return cls(
            default_highlight_color=ColorTag[data.get("default_highlight_color", "YELLOW")],
            highlight_opacity=data.get("highlight_opacity", 0.5),
            text_font_size=data.get("text_font_size", 12.0),
            text_font_name=data.get("text_font_name", "helv"),
            output_file_name=data.get("output_file_name", "annotated.pdf"),
        )


class AppSettings:
    """
    Application settings manager with QSettings persistence.
    Singleton pattern for global access from the desktop shell; the
    annotation engine itself only ever receives plain values.
    """

    _instance: Optional[AppSettings] = None

    ORGANIZATION_NAME = "PageMark"
    APPLICATION_NAME = "PageMark"

    def __new__(cls) -> AppSettings:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._qsettings = QSettings(self.ORGANIZATION_NAME, self.APPLICATION_NAME)

        self.viewer = self._load_viewer_settings()
        self.annotation = self._load_annotation_settings()

        self.recent_directories: List[str] = self._load_recent_directories()

        self._initialized = True

    def _load_viewer_settings(self) -> ViewerSettings:
        """Load viewer settings from QSettings."""
        data = self._qsettings.value("settings/viewer")
        if data:
            try:
                return ViewerSettings.from_dict(json.loads(data))
            except (json.JSONDecodeError, KeyError, TypeError):
                logger.warning("Ignoring unreadable viewer settings")
        return ViewerSettings()

    def _load_annotation_settings(self) -> AnnotationSettings:
        """Load annotation settings from QSettings."""
        data = self._qsettings.value("settings/annotation")
        if data:
            try:
                return AnnotationSettings.from_dict(json.loads(data))
            except (json.JSONDecodeError, KeyError, TypeError):
                logger.warning("Ignoring unreadable annotation settings")
        return AnnotationSettings()

    def _load_recent_directories(self) -> List[str]:
        """Load recent directories list."""
        data = self._qsettings.value("recent/directories", [])
        return data if isinstance(data, list) else []

    def save(self) -> None:
        """Save all settings to persistent storage."""
        self._qsettings.setValue("settings/viewer", json.dumps(self.viewer.to_dict()))
        self._qsettings.setValue("settings/annotation", json.dumps(self.annotation.to_dict()))
        self._qsettings.setValue("recent/directories", self.recent_directories)
        self._qsettings.sync()

    def add_recent_directory(self, directory_path: str, max_recent: int = 10) -> None:
        """Add a directory to the recent directories list."""
        if directory_path in self.recent_directories:
            self.recent_directories.remove(directory_path)
        self.recent_directories.insert(0, directory_path)
        self.recent_directories = self.recent_directories[:max_recent]

    @property
    def last_directory(self) -> str:
        return self.recent_directories[0] if self.recent_directories else ""
