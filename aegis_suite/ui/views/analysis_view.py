import numpy as np
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QComboBox, QTableWidget,
    QTableWidgetItem, QHeaderView
)
from PyQt6.QtCore import QEvent
from matplotlib.figure import Figure
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas

from ...core import store
from ...core.analytics import TIMEFRAMES, filter_by_timeframe, summarize, profile_distribution
from ...core.strategies import STOCKS_COLOR, BONDS_COLOR, GOLD_COLOR
from ..event_bus import bus

TIMEFRAME_LABELS = {
    "all": "All time",
    "month": "Last month",
    "quarter": "Last quarter",
    "year": "Last year",
}

PROFILE_COLORS = [BONDS_COLOR, STOCKS_COLOR, GOLD_COLOR]

class AnalysisView(QWidget):
    def __init__(self):
        super().__init__()
        root = QVBoxLayout(self)
        title = QLabel("Analysis")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        root.addWidget(title)

        top = QHBoxLayout()
        self.timeframe = QComboBox()
        for key in TIMEFRAMES:
            self.timeframe.addItem(TIMEFRAME_LABELS[key], key)
        self.timeframe.currentIndexChanged.connect(self.refresh)
        top.addWidget(QLabel("Timeframe:")); top.addWidget(self.timeframe); top.addStretch(1)
        root.addLayout(top)

        self.lbl_summary = QLabel("")
        self.lbl_summary.setStyleSheet("color:#333;")
        root.addWidget(self.lbl_summary)

        # --- Chart ---
        self.fig = Figure(figsize=(8, 3.5), constrained_layout=True)
        self.canvas = FigureCanvas(self.fig)
        root.addWidget(self.canvas, 2)

        root.addWidget(QLabel("Average allocation"))
        self.tbl = QTableWidget(0, 2)
        self.tbl.setHorizontalHeaderLabels(["Asset Class", "Average %"])
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.tbl.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl, 1)

        bus.dataChanged.connect(lambda _t: self.refresh())
        self.refresh()

    def refresh(self, *_):
        recs = filter_by_timeframe(store.list_recommendations(), self.timeframe.currentData())
        stats = summarize(recs)
        self.lbl_summary.setText(
            f"Recommendations: {stats.total}   |   Final: {stats.by_status.get(store.STATUS_FINAL, 0)}   |   "
            f"Strategies in use: {stats.distinct_strategies}   |   Total amount: {stats.total_invested:,.2f}"
        )
        self.draw(recs, stats)

        self.tbl.setRowCount(len(stats.average_allocation))
        for r, (name, pct) in enumerate(stats.average_allocation.items()):
            self.tbl.setItem(r, 0, QTableWidgetItem(name))
            self.tbl.setItem(r, 1, QTableWidgetItem(f"{pct:.2f}%"))

    def draw(self, recs, stats):
        self.fig.clear()
        ax1 = self.fig.add_subplot(1, 2, 1)
        ax2 = self.fig.add_subplot(1, 2, 2)

        dist = profile_distribution(recs)
        counts = [n for _, n, _ in dist]
        if sum(counts):
            ax1.pie(counts, labels=[f"{label} ({pct}%)" for label, _, pct in dist],
                    colors=PROFILE_COLORS, startangle=90)
        else:
            ax1.text(0.5, 0.5, "No recommendations", ha="center", va="center")
            ax1.axis("off")
        ax1.set_title("By risk profile")

        names = list(stats.by_strategy)
        x = np.arange(len(names))
        ax2.bar(x, [stats.by_strategy[n] for n in names], color=STOCKS_COLOR)
        ax2.set_xticks(x)
        ax2.set_xticklabels(names, rotation=30, ha="right", fontsize=8)
        ax2.set_title("By strategy")
        self.canvas.draw_idle()

    def showEvent(self, event: QEvent):
        super().showEvent(event)
        self.refresh()
