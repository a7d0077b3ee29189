"""Core package - page geometry, overlay capture, and PDF baking."""

__all__ = [
    "Result",
    "Success",
    "Failure",
    "AppError",
    "EngineException",
    "PDFEngine",
    "DocumentManager",
    "PageRegistry",
    "OverlayStore",
    "OverlayRenderer",
    "SelectionCapture",
    "DocumentBakeEngine",
]

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name in ("Result", "Success", "Failure", "AppError", "EngineException"):
        from core import error_types
        return getattr(error_types, name)
    elif name == "PDFEngine":
        from core.pdf_engine import PDFEngine
        return PDFEngine
    elif name == "DocumentManager":
        from core.document_manager import DocumentManager
        return DocumentManager
    elif name == "PageRegistry":
        from core.page_registry import PageRegistry
        return PageRegistry
    elif name == "OverlayStore":
        from core.overlay_store import OverlayStore
        return OverlayStore
    elif name == "OverlayRenderer":
        from core.overlay_renderer import OverlayRenderer
        return OverlayRenderer
    elif name == "SelectionCapture":
        from core.selection_capture import SelectionCapture
        return SelectionCapture
    elif name == "DocumentBakeEngine":
        from core.bake_engine import DocumentBakeEngine
        return DocumentBakeEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
