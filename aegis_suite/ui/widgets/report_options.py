"""Dialog for customizing a single-recommendation PDF before export."""

from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QVBoxLayout,
    QLineEdit,
    QTextEdit,
    QComboBox,
    QCheckBox,
    QMessageBox,
)

from ...core.errors import ExportError
from ...core.reports import REPORT_FORMATS, SECTION_KEYS, SECTION_LABELS, ReportOptions

FORMAT_LABELS = {
    "detailed": "Detailed",
    "summary": "Summary",
    "presentation": "Presentation",
}


class ReportOptionsDialog(QDialog):
    """Title, description, client name, sections, format and notes for one report."""

    def __init__(self, options: ReportOptions, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Customize Report")
        self._options = options
        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        form = QFormLayout()
        self.title = QLineEdit(self._options.title)
        self.client_name = QLineEdit(self._options.client_name)
        self.description = QTextEdit(self._options.description)
        self.description.setPlaceholderText("Replaces the generated executive summary")
        self.description.setMaximumHeight(80)
        self.report_format = QComboBox()
        for key in REPORT_FORMATS:
            self.report_format.addItem(FORMAT_LABELS[key], key)
        self.report_format.setCurrentIndex(self.report_format.findData(self._options.report_format))
        form.addRow("Report title", self.title)
        form.addRow("Client name", self.client_name)
        form.addRow("Description", self.description)
        form.addRow("Format", self.report_format)
        layout.addLayout(form)

        sections = QGroupBox("Sections")
        sections_layout = QVBoxLayout(sections)
        self.section_checks = {}
        for key in SECTION_KEYS:
            cb = QCheckBox(SECTION_LABELS[key])
            cb.setChecked(self._options.enabled(key))
            self.section_checks[key] = cb
            sections_layout.addWidget(cb)
        layout.addWidget(sections)

        self.notes = QTextEdit(self._options.notes)
        self.notes.setPlaceholderText("Additional notes")
        self.notes.setMaximumHeight(80)
        layout.addWidget(self.notes)

        btns = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel, parent=self)
        btns.accepted.connect(self._on_accept)
        btns.rejected.connect(self.reject)
        layout.addWidget(btns)

    def options(self) -> ReportOptions:
        return ReportOptions(
            title=self.title.text().strip(),
            description=self.description.toPlainText().strip(),
            client_name=self.client_name.text().strip(),
            notes=self.notes.toPlainText().strip(),
            report_format=self.report_format.currentData(),
            **{f"include_{key}": cb.isChecked() for key, cb in self.section_checks.items()},
        )

    def _on_accept(self):
        try:
            self.options().validate()
        except ExportError as e:
            QMessageBox.warning(self, "Check the report options", str(e))
            return
        self.accept()
