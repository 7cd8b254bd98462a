from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QTextEdit, QPushButton,
    QTableWidget, QTableWidgetItem, QHeaderView, QMessageBox, QFileDialog
)

from ...core import store
from ...core.backup import default_csv_name, export_csv
from ...core.errors import AegisError
from ...core.store import Client, new_client, save_client, load_client, delete_client, search_clients
from ..event_bus import bus, notify_changed

class ClientView(QWidget):
    def __init__(self):
        super().__init__()
        self.current: Client = new_client()
        self._clients = []

        root = QVBoxLayout(self)
        title = QLabel("Clients")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        root.addWidget(title)

        # --- Top: search + actions ---
        top = QHBoxLayout()
        self.search = QLineEdit(); self.search.setPlaceholderText("Search name, email, phone or tax ID")
        self.search.textChanged.connect(self.refresh_client_list)
        top.addWidget(self.search, 1)
        self.btn_new = QPushButton("New"); self.btn_new.clicked.connect(self.on_new)
        self.btn_save = QPushButton("Save"); self.btn_save.clicked.connect(self.on_save)
        self.btn_delete = QPushButton("Delete"); self.btn_delete.clicked.connect(self.on_delete)
        self.btn_export = QPushButton("Export CSV"); self.btn_export.clicked.connect(self.on_export)
        for b in (self.btn_new, self.btn_save, self.btn_delete, self.btn_export):
            top.addWidget(b)
        root.addLayout(top)

        self.tbl = QTableWidget(0, 4)
        self.tbl.setHorizontalHeaderLabels(["Name", "Email", "Phone", "Updated"])
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.tbl.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.tbl.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.tbl.itemSelectionChanged.connect(self.on_pick)
        root.addWidget(self.tbl, 1)

        # --- fields ---
        row = QHBoxLayout()
        self.name = QLineEdit(); self.email = QLineEdit(); self.phone = QLineEdit()
        self.birth = QLineEdit(); self.birth.setPlaceholderText("YYYY-MM-DD")
        self.tax_id = QLineEdit(); self.address = QLineEdit()

        col1 = QVBoxLayout(); col2 = QVBoxLayout(); col3 = QVBoxLayout()
        def add(col, lab, w):
            col.addWidget(QLabel(lab)); col.addWidget(w)

        add(col1, "Name", self.name); add(col1, "Birth Date", self.birth)
        add(col2, "Email", self.email); add(col2, "Tax ID", self.tax_id)
        add(col3, "Phone", self.phone); add(col3, "Address", self.address)
        row.addLayout(col1, 1); row.addLayout(col2, 1); row.addLayout(col3, 1)
        root.addLayout(row)

        self.notes = QTextEdit()
        root.addWidget(QLabel("Notes"))
        root.addWidget(self.notes, 1)

        bus.dataChanged.connect(self.on_data_changed)
        self.refresh_client_list()
        self.load_into_form(self.current)

    # ---- helpers ----
    def on_data_changed(self, table: str):
        if table == store.CLIENTS:
            self.refresh_client_list()

    def refresh_client_list(self, *_):
        self.tbl.blockSignals(True)
        self._clients = search_clients(self.search.text())
        self.tbl.setRowCount(len(self._clients))
        for r, c in enumerate(self._clients):
            for col, val in enumerate([c.name, c.email, c.phone, c.updated_at]):
                self.tbl.setItem(r, col, QTableWidgetItem(val or ""))
        self.tbl.blockSignals(False)

    def on_pick(self):
        r = self.tbl.currentRow()
        if r < 0 or r >= len(self._clients): return
        c = load_client(self._clients[r].id)
        if c:
            self.current = c
            self.load_into_form(c)

    def on_new(self):
        self.current = new_client()
        self.load_into_form(self.current)
        self.tbl.clearSelection()

    def on_save(self):
        c = self.collect_from_form()
        if len(c.name) < 3:
            QMessageBox.warning(self, "Save failed", "Client name must have at least 3 characters.")
            return
        save_client(c)
        # reload from disk so UI reflects persisted object
        self.current = load_client(c.id) or c
        self.load_into_form(self.current)
        notify_changed(store.CLIENTS)
        QMessageBox.information(self, "Saved", f"Client '{c.name}' saved.")

    def on_delete(self):
        if self.current.id is None: return
        ok = QMessageBox.question(self, "Delete", f"Delete client '{self.current.name}'?")
        if ok != QMessageBox.StandardButton.Yes: return
        delete_client(self.current.id)
        self.on_new()
        notify_changed(store.CLIENTS)

    def on_export(self):
        path, _ = QFileDialog.getSaveFileName(self, "Export CSV", default_csv_name(store.CLIENTS), "CSV (*.csv)")
        if not path: return
        try:
            n = export_csv(store.CLIENTS, path)
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Export failed", str(e)); return
        QMessageBox.information(self, "Exported", f"Exported {n} client(s) to {path}")

    # ---- form <-> model ----
    def load_into_form(self, c: Client):
        self.name.setText(c.name or ""); self.email.setText(c.email or "")
        self.phone.setText(c.phone or ""); self.birth.setText(c.birth_date or "")
        self.tax_id.setText(c.tax_id or ""); self.address.setText(c.address or "")
        self.notes.setPlainText(c.notes or "")

    def collect_from_form(self) -> Client:
        c = self.current
        c.name = self.name.text().strip()
        c.email = self.email.text().strip()
        c.phone = self.phone.text().strip()
        c.birth_date = self.birth.text().strip()
        c.tax_id = self.tax_id.text().strip()
        c.address = self.address.text().strip()
        c.notes = self.notes.toPlainText()
        return c
