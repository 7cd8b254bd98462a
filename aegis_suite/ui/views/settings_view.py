from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QCheckBox, QPushButton,
    QGroupBox, QFormLayout, QMessageBox, QFileDialog
)

from ...core import store
from ...core.backup import create_backup, default_backup_name, restore_backup
from ...core.config import Settings, AppSettings, BrandingSettings, load_settings, save_settings
from ...core.errors import AegisError
from ...core.reports import invalid_colors
from ..event_bus import SETTINGS, notify_changed

class SettingsView(QWidget):
    def __init__(self):
        super().__init__()
        root = QVBoxLayout(self)
        title = QLabel("Settings")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        root.addWidget(title)

        # --- application ---
        app_box = QGroupBox("Application"); app_form = QFormLayout(app_box)
        self.company = QLineEdit(); self.advisor = QLineEdit()
        self.auto_save = QCheckBox("Save drafts automatically when the preview is reached")
        app_form.addRow("Company name", self.company)
        app_form.addRow("Advisor name", self.advisor)
        app_form.addRow("", self.auto_save)
        root.addWidget(app_box)

        # --- branding ---
        brand_box = QGroupBox("Report branding"); brand_form = QFormLayout(brand_box)
        self.brand_company = QLineEdit(); self.logo = QLineEdit()
        self.primary = QLineEdit(); self.secondary = QLineEdit(); self.accent = QLineEdit()
        self.header = QLineEdit(); self.footer = QLineEdit()
        for lab, w in [("Company on reports", self.brand_company), ("Logo path", self.logo),
                       ("Primary colour", self.primary), ("Secondary colour", self.secondary),
                       ("Accent colour", self.accent), ("Report header", self.header),
                       ("Report footer", self.footer)]:
            brand_form.addRow(lab, w)
        root.addWidget(brand_box)

        row = QHBoxLayout()
        self.btn_save = QPushButton("Save Settings"); self.btn_save.clicked.connect(self.on_save)
        row.addStretch(1); row.addWidget(self.btn_save)
        root.addLayout(row)

        # --- data ---
        data_box = QGroupBox("Data"); data_lay = QHBoxLayout(data_box)
        self.btn_backup = QPushButton("Create Backup"); self.btn_backup.clicked.connect(self.on_backup)
        self.btn_restore = QPushButton("Restore Backup"); self.btn_restore.clicked.connect(self.on_restore)
        self.btn_clear = QPushButton("Clear Recommendations"); self.btn_clear.clicked.connect(self.on_clear)
        data_lay.addWidget(self.btn_backup); data_lay.addWidget(self.btn_restore)
        data_lay.addStretch(1); data_lay.addWidget(self.btn_clear)
        root.addWidget(data_box)

        self.lbl_info = QLabel("")
        self.lbl_info.setStyleSheet("color:#555;")
        root.addWidget(self.lbl_info)
        root.addStretch(1)

        self.load_into_form(load_settings())

    # ---- form <-> model ----
    def load_into_form(self, s: Settings):
        self.company.setText(s.app.company_name); self.advisor.setText(s.app.advisor_name)
        self.auto_save.setChecked(s.app.auto_save)
        b = s.branding
        self.brand_company.setText(b.company_name); self.logo.setText(b.logo_path)
        self.primary.setText(b.primary_color); self.secondary.setText(b.secondary_color)
        self.accent.setText(b.accent_color)
        self.header.setText(b.report_header); self.footer.setText(b.report_footer)

    def collect_from_form(self) -> Settings:
        return Settings(
            app=AppSettings(
                company_name=self.company.text().strip(),
                advisor_name=self.advisor.text().strip(),
                auto_save=self.auto_save.isChecked(),
            ),
            branding=BrandingSettings(
                company_name=self.brand_company.text().strip(),
                logo_path=self.logo.text().strip(),
                primary_color=self.primary.text().strip() or BrandingSettings.primary_color,
                secondary_color=self.secondary.text().strip() or BrandingSettings.secondary_color,
                accent_color=self.accent.text().strip() or BrandingSettings.accent_color,
                report_header=self.header.text().strip(),
                report_footer=self.footer.text().strip(),
            ),
        )

    # ---- actions ----
    def on_save(self):
        s = self.collect_from_form()
        bad = invalid_colors(s.branding)
        if bad:
            names = ", ".join(b.replace("_", " ") for b in bad)
            QMessageBox.warning(self, "Check the colours",
                                f"Not a valid colour: {names}. Use a name like 'navy' or a hex code like '#4f46e5'.")
            return
        try:
            path = save_settings(s)
        except OSError as e:
            QMessageBox.critical(self, "Save failed", str(e)); return
        notify_changed(SETTINGS)
        self.lbl_info.setText(f"Settings saved to {path}")

    def on_backup(self):
        path, _ = QFileDialog.getSaveFileName(self, "Create Backup", default_backup_name(), "JSON (*.json)")
        if not path: return
        try:
            info = create_backup(path)
        except OSError as e:
            QMessageBox.critical(self, "Backup failed", str(e)); return
        self.lbl_info.setText(f"Backup {info.path}: {info.items} item(s), {info.size_kb} KB")

    def on_restore(self):
        path, _ = QFileDialog.getOpenFileName(self, "Restore Backup", "", "JSON (*.json)")
        if not path: return
        ok = QMessageBox.question(self, "Restore", "Replace current data with the backup contents?")
        if ok != QMessageBox.StandardButton.Yes: return
        try:
            restored = restore_backup(path)
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Restore failed", str(e)); return
        for table in restored:
            notify_changed(table)
        self.lbl_info.setText("Restored " + ", ".join(f"{n} {t}" for t, n in restored.items()))

    def on_clear(self):
        ok = QMessageBox.question(self, "Clear", "Delete every saved recommendation? This cannot be undone.")
        if ok != QMessageBox.StandardButton.Yes: return
        n = store.clear_recommendations()
        notify_changed(store.RECOMMENDATIONS)
        self.lbl_info.setText(f"Deleted {n} recommendation(s)")
