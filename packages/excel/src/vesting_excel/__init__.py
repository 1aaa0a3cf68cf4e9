"""Excel export for vesting engine reports."""

from .workbook_renderer import VestingWorkbookRenderer

__all__ = ["VestingWorkbookRenderer"]
