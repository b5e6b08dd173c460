"""Source tree capture for blueprints."""

from .discovery import TreeScanner, build_exclusions, is_excluded
from .errors import CaptureError
from .models import CaptureResult, ScanEntry, ScanResult, SkippedPath
from .pipeline import BlueprintCapture, capture_tree, read_text_content

__all__ = [
    "BlueprintCapture",
    "CaptureError",
    "CaptureResult",
    "ScanEntry",
    "ScanResult",
    "SkippedPath",
    "TreeScanner",
    "build_exclusions",
    "capture_tree",
    "is_excluded",
    "read_text_content",
]
