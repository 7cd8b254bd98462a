"""Allocation table widget: asset class, percent, target range."""

from typing import List
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QTableWidget,
    QTableWidgetItem,
    QHeaderView,
    QLabel,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor

from ...core.reports import target_range
from ...core.strategies import AllocationSlice


class AllocationTableWidget(QWidget):
    """Read-only table of allocation slices with a colour swatch per row."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.title_label = QLabel("Asset Allocation")
        self.title_label.setStyleSheet("font-weight: bold; font-size: 14px;")
        layout.addWidget(self.title_label)

        self.table = QTableWidget()
        self.table.setColumnCount(3)
        self.table.setHorizontalHeaderLabels(["Asset Class", "Allocation", "Target Range"])

        header = self.table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)

        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        layout.addWidget(self.table)

    def set_title(self, title: str):
        self.title_label.setText(title)

    def set_allocation(self, slices: List[AllocationSlice]):
        self.table.setRowCount(len(slices))
        for row, s in enumerate(slices):
            name = QTableWidgetItem(s.name)
            name.setForeground(QColor(s.color))
            self.table.setItem(row, 0, name)

            pct = QTableWidgetItem(f"{s.percent:g}%")
            pct.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
            self.table.setItem(row, 1, pct)

            lo, hi = target_range(s.percent)
            self.table.setItem(row, 2, QTableWidgetItem(f"{lo:g}% - {hi:g}%"))

    def clear(self):
        self.table.setRowCount(0)
