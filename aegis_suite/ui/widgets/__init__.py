"""Reusable UI widgets."""

from aegis_suite.ui.widgets.allocation_table import AllocationTableWidget
from aegis_suite.ui.widgets.report_options import ReportOptionsDialog

__all__ = [
    "AllocationTableWidget",
    "ReportOptionsDialog",
]
