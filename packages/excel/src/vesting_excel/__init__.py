"""Excel layer for vesting pools: workbook rendering and manifest loading."""

from .schedule_sheet_renderer import VestingSheetRenderer
from .manifest import load_manifest

__all__ = [
    "VestingSheetRenderer",
    "load_manifest",
]
