from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QComboBox, QPushButton,
    QTableWidget, QTableWidgetItem, QHeaderView, QMessageBox, QFileDialog
)
from PyQt6.QtCore import Qt

from ...core import store
from ...core.backup import default_csv_name, export_csv
from ...core.config import load_settings
from ...core.errors import AegisError
from ...core.investment import RiskProfile
from ...core.reports import ReportOptions, default_report_name, export_history_pdf, export_recommendation_pdf
from ..event_bus import bus, notify_changed
from ..widgets import AllocationTableWidget, ReportOptionsDialog

SORT_LABELS = {
    "date-desc": "Newest first",
    "date-asc": "Oldest first",
    "name-asc": "Title A-Z",
    "name-desc": "Title Z-A",
}

COLUMNS = ["ID", "Title", "Date", "Client", "Risk Profile", "Strategy", "Status"]

class HistoryView(QWidget):
    def __init__(self):
        super().__init__()
        self._rows = []

        root = QVBoxLayout(self)
        title = QLabel("Recommendation History")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        root.addWidget(title)

        # --- filters ---
        filters = QHBoxLayout()
        self.search = QLineEdit(); self.search.setPlaceholderText("Search title, client or strategy")
        self.search.textChanged.connect(self.refresh)
        self.risk = QComboBox(); self.risk.addItem("All profiles", "all")
        for p in RiskProfile:
            self.risk.addItem(p.label, p.value)
        self.status = QComboBox(); self.status.addItem("Any status", "all")
        for s in store.STATUSES:
            self.status.addItem(s, s)
        self.sort = QComboBox()
        for key, label in SORT_LABELS.items():
            self.sort.addItem(label, key)
        for cb in (self.risk, self.status, self.sort):
            cb.currentIndexChanged.connect(self.refresh)
        filters.addWidget(self.search, 2)
        filters.addWidget(self.risk); filters.addWidget(self.status); filters.addWidget(self.sort)
        root.addLayout(filters)

        self.tbl = QTableWidget(0, len(COLUMNS))
        self.tbl.setHorizontalHeaderLabels(COLUMNS)
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.tbl.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.tbl.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.tbl.itemSelectionChanged.connect(self.on_select)
        root.addWidget(self.tbl, 2)

        self.detail = AllocationTableWidget()
        root.addWidget(self.detail, 1)

        # --- actions ---
        btns = QHBoxLayout()
        self.btn_status = QPushButton("Toggle Draft/Final"); self.btn_status.clicked.connect(self.on_toggle_status)
        self.btn_delete = QPushButton("Delete"); self.btn_delete.clicked.connect(self.on_delete)
        self.btn_pdf = QPushButton("Export PDF"); self.btn_pdf.clicked.connect(self.on_export_pdf)
        self.btn_custom = QPushButton("Customize Report..."); self.btn_custom.clicked.connect(self.on_customize_report)
        self.btn_history = QPushButton("Export History PDF"); self.btn_history.clicked.connect(self.on_export_history)
        self.btn_csv = QPushButton("Export CSV"); self.btn_csv.clicked.connect(self.on_export_csv)
        for b in (self.btn_status, self.btn_delete):
            btns.addWidget(b)
        btns.addStretch(1)
        for b in (self.btn_pdf, self.btn_custom, self.btn_history, self.btn_csv):
            btns.addWidget(b)
        root.addLayout(btns)

        self.lbl_count = QLabel("")
        self.lbl_count.setStyleSheet("color:#555;")
        root.addWidget(self.lbl_count)

        bus.dataChanged.connect(lambda _t: self.refresh())
        bus.recommendationSaved.connect(self.on_saved)
        self.refresh()

    # ---- helpers ----
    def refresh(self, *_):
        self._rows = store.query_recommendations(
            search=self.search.text(),
            risk_profile=self.risk.currentData(),
            status=self.status.currentData(),
            sort_by=self.sort.currentData(),
        )
        self.tbl.setRowCount(len(self._rows))
        for r, rec in enumerate(self._rows):
            vals = [str(rec.id), rec.title, rec.created_at[:10], rec.client_name,
                    rec.risk_profile, rec.strategy, rec.status]
            for c, val in enumerate(vals):
                item = QTableWidgetItem(val or "")
                if c == 0:
                    item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
                self.tbl.setItem(r, c, item)
        self.lbl_count.setText(f"{len(self._rows)} recommendation(s)")
        self.detail.clear()

    def on_saved(self, rec):
        self.refresh()
        for r, row in enumerate(self._rows):
            if row.id == rec.id:
                self.tbl.selectRow(r); break

    def selected(self):
        r = self.tbl.currentRow()
        if 0 <= r < len(self._rows):
            return self._rows[r]
        return None

    def on_select(self):
        rec = self.selected()
        if rec is None:
            self.detail.clear(); return
        self.detail.set_title(f"{rec.title} ({rec.strategy})")
        self.detail.set_allocation(rec.allocation)

    # ---- actions ----
    def on_toggle_status(self):
        rec = self.selected()
        if rec is None: return
        new = store.STATUS_DRAFT if rec.status == store.STATUS_FINAL else store.STATUS_FINAL
        store.set_status(rec.id, new)
        notify_changed(store.RECOMMENDATIONS)

    def on_delete(self):
        rec = self.selected()
        if rec is None: return
        ok = QMessageBox.question(self, "Delete", f"Delete '{rec.title}'? This cannot be undone.")
        if ok != QMessageBox.StandardButton.Yes: return
        store.delete_recommendation(rec.id)
        notify_changed(store.RECOMMENDATIONS)

    def on_export_pdf(self):
        rec = self.selected()
        if rec is None:
            QMessageBox.information(self, "Export PDF", "Select a recommendation first.")
            return
        self._export_pdf(rec, ReportOptions.for_recommendation(rec))

    def on_customize_report(self):
        rec = self.selected()
        if rec is None:
            QMessageBox.information(self, "Customize Report", "Select a recommendation first.")
            return
        dlg = ReportOptionsDialog(ReportOptions.for_recommendation(rec), self)
        if not dlg.exec(): return
        self._export_pdf(rec, dlg.options())

    def _export_pdf(self, rec, options: ReportOptions):
        path, _ = QFileDialog.getSaveFileName(self, "Export PDF", default_report_name(rec), "PDF (*.pdf)")
        if not path: return
        try:
            export_recommendation_pdf(rec, path, load_settings().branding, options)
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Export failed", str(e)); return
        QMessageBox.information(self, "Exported", f"Saved {path}")

    def on_export_history(self):
        path, _ = QFileDialog.getSaveFileName(self, "Export History", "recommendation_history.pdf", "PDF (*.pdf)")
        if not path: return
        try:
            export_history_pdf(self._rows, path, load_settings().branding)
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Export failed", str(e)); return
        QMessageBox.information(self, "Exported", f"Saved {path}")

    def on_export_csv(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export CSV", default_csv_name(store.RECOMMENDATIONS), "CSV (*.csv)")
        if not path: return
        try:
            n = export_csv(store.RECOMMENDATIONS, path)
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Export failed", str(e)); return
        QMessageBox.information(self, "Exported", f"Exported {n} recommendation(s) to {path}")
