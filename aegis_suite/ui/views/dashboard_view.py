from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QTableWidget,
    QTableWidgetItem, QHeaderView, QFrame
)
from PyQt6.QtCore import pyqtSignal, QEvent

from ...core import store
from ...core.analytics import summarize
from ..event_bus import bus

def _card(title: str):
    frame = QFrame()
    frame.setFrameShape(QFrame.Shape.StyledPanel)
    lay = QVBoxLayout(frame)
    t = QLabel(title); t.setStyleSheet("color:#555;")
    v = QLabel("0"); v.setStyleSheet("font-size:24px; font-weight:700;")
    lay.addWidget(t); lay.addWidget(v)
    return frame, v

class DashboardView(QWidget):
    newRequested = pyqtSignal()

    def __init__(self):
        super().__init__()
        layout = QVBoxLayout(self)
        title = QLabel("Dashboard")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        layout.addWidget(title)

        cards = QHBoxLayout()
        f1, self.lbl_total = _card("Total recommendations")
        f2, self.lbl_strategies = _card("Strategies in use")
        f3, self.lbl_invested = _card("Total amount recommended")
        cards.addWidget(f1); cards.addWidget(f2); cards.addWidget(f3)
        layout.addLayout(cards)

        actions = QHBoxLayout()
        self.btn_new = QPushButton("New Recommendation")
        self.btn_new.clicked.connect(self.newRequested.emit)
        actions.addWidget(self.btn_new); actions.addStretch(1)
        layout.addLayout(actions)

        layout.addWidget(QLabel("Recent recommendations"))
        self.tbl = QTableWidget(0, 5)
        self.tbl.setHorizontalHeaderLabels(["Title", "Client", "Risk Profile", "Strategy", "Status"])
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.tbl.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        layout.addWidget(self.tbl, 1)

        bus.dataChanged.connect(lambda _t: self.refresh())
        self.refresh()

    def refresh(self):
        recs = store.list_recommendations()
        stats = summarize(recs)
        self.lbl_total.setText(str(stats.total))
        self.lbl_strategies.setText(str(stats.distinct_strategies))
        self.lbl_invested.setText(f"{stats.total_invested:,.2f}")

        recent = recs[:5]
        self.tbl.setRowCount(len(recent))
        for r, rec in enumerate(recent):
            for c, val in enumerate([rec.title, rec.client_name, rec.risk_profile, rec.strategy, rec.status]):
                self.tbl.setItem(r, c, QTableWidgetItem(val or ""))

    def showEvent(self, event: QEvent):
        super().showEvent(event)
        self.refresh()
