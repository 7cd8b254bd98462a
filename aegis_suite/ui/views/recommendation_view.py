# aegis_suite/ui/views/recommendation_view.py
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QSpinBox, QComboBox,
    QPushButton, QStackedWidget, QRadioButton, QButtonGroup, QSlider, QCheckBox,
    QGroupBox, QGridLayout, QMessageBox, QTextEdit
)
from PyQt6.QtCore import Qt, pyqtSignal

from ...core.config import load_settings
from ...core.asset_classes import WIZARD_CATEGORIES, catalog_by_category
from ...core.errors import AegisError
from ...core.investment import OBJECTIVES, RiskProfile, HorizonType, MIN_HORIZON_YEARS, MAX_HORIZON_YEARS
from ...core.reports import strategy_description
from ...core.store import CLIENTS, list_clients
from ...core.strategies import BUILTIN_STRATEGIES
from ...core.wizard import RecommendationWizard, WizardStep, STEP_ORDER, STEP_LABELS
from ..event_bus import SETTINGS, bus, publish_recommendation
from ..widgets import AllocationTableWidget

STATUS_STYLE = {
    "complete": "color:#16a34a; font-weight:600;",
    "current": "color:#4f46e5; font-weight:700;",
    "upcoming": "color:#9ca3af;",
}

class RecommendationView(QWidget):
    finished = pyqtSignal(object)

    def __init__(self):
        super().__init__()
        self.wizard = self._new_wizard()

        root = QVBoxLayout(self)
        title = QLabel("Create Investment Recommendation")
        title.setStyleSheet("font-size:20px; font-weight:600;")
        root.addWidget(title)

        # --- step indicator ---
        steps = QHBoxLayout()
        self.step_labels = {}
        for i, s in enumerate(STEP_ORDER):
            lbl = QLabel(f"{i + 1}. {STEP_LABELS[s]}")
            self.step_labels[s] = lbl
            steps.addWidget(lbl)
        steps.addStretch(1)
        root.addLayout(steps)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._client_page())
        self.pages.addWidget(self._risk_page())
        self.pages.addWidget(self._horizon_page())
        self.pages.addWidget(self._assets_page())
        self.pages.addWidget(self._strategy_page())
        self.pages.addWidget(self._preview_page())
        root.addWidget(self.pages, 1)

        nav = QHBoxLayout()
        self.btn_prev = QPushButton("Previous"); self.btn_prev.clicked.connect(self.on_previous)
        self.btn_next = QPushButton("Next"); self.btn_next.clicked.connect(self.on_next)
        nav.addWidget(self.btn_prev); nav.addStretch(1); nav.addWidget(self.btn_next)
        root.addLayout(nav)

        bus.dataChanged.connect(self.on_data_changed)
        self.sync()

    # ---- pages ----
    def _client_page(self):
        w = QWidget(); lay = QVBoxLayout(w)
        row = QHBoxLayout()
        self.clientPicker = QComboBox()
        self.clientPicker.currentIndexChanged.connect(self.on_pick_client)
        row.addWidget(QLabel("Existing client:")); row.addWidget(self.clientPicker, 1)
        lay.addLayout(row)

        self.name = QLineEdit()
        self.age = QSpinBox(); self.age.setRange(18, 120); self.age.setValue(35)
        self.objective = QComboBox()
        for key, label in OBJECTIVES.items():
            self.objective.addItem(label, key)
        self.objective.setCurrentIndex(self.objective.findData("wealth"))
        self.amount = QLineEdit("100000")
        for lab, widget in [("Client Name", self.name), ("Age", self.age),
                            ("Investment Objective", self.objective), ("Investment Amount", self.amount)]:
            lay.addWidget(QLabel(lab)); lay.addWidget(widget)
        lay.addStretch(1)
        self.refresh_clients()
        return w

    def _risk_page(self):
        w = QWidget(); lay = QVBoxLayout(w)
        self.risk_hint = QLabel(""); self.risk_hint.setStyleSheet("color:#555;")
        lay.addWidget(self.risk_hint)
        self.risk_group = QButtonGroup(w)
        self.risk_buttons = {}
        for p in RiskProfile:
            rb = QRadioButton(p.label)
            self.risk_group.addButton(rb)
            self.risk_buttons[p] = rb
            lay.addWidget(rb)
        lay.addStretch(1)
        return w

    def _horizon_page(self):
        w = QWidget(); lay = QVBoxLayout(w)
        self.horizon_lbl = QLabel("")
        self.horizon_lbl.setStyleSheet("font-size:16px; font-weight:600;")
        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(MIN_HORIZON_YEARS, MAX_HORIZON_YEARS)
        self.slider.valueChanged.connect(self.on_years)
        self.horizon_type = QComboBox()
        for t in HorizonType:
            self.horizon_type.addItem(t.label, t)
        self.horizon_type.currentIndexChanged.connect(self.on_horizon_type)
        lay.addWidget(QLabel("Investment timeframe")); lay.addWidget(self.horizon_lbl); lay.addWidget(self.slider)
        lay.addWidget(QLabel("Horizon type")); lay.addWidget(self.horizon_type)
        lay.addStretch(1)
        return w

    def _assets_page(self):
        w = QWidget(); lay = QGridLayout(w)
        self.asset_checks = {}
        for col, cat in enumerate(WIZARD_CATEGORIES):
            box = QGroupBox(cat.value); bl = QVBoxLayout(box)
            for a in catalog_by_category(cat):
                cb = QCheckBox(a.name); cb.setToolTip(a.description)
                self.asset_checks[a.id] = cb
                bl.addWidget(cb)
            bl.addStretch(1)
            lay.addWidget(box, col // 2, col % 2)
        return w

    def _strategy_page(self):
        w = QWidget(); lay = QVBoxLayout(w)
        self.strategy = QComboBox()
        for key, s in BUILTIN_STRATEGIES.items():
            self.strategy.addItem(s.name, key)
        self.strategy.currentIndexChanged.connect(self.on_strategy_changed)
        self.strategy_desc = QLabel(""); self.strategy_desc.setWordWrap(True)
        lay.addWidget(QLabel("Allocation strategy")); lay.addWidget(self.strategy); lay.addWidget(self.strategy_desc)
        lay.addStretch(1)
        return w

    def _preview_page(self):
        w = QWidget(); lay = QVBoxLayout(w)
        self.preview_lbl = QLabel(""); self.preview_lbl.setWordWrap(True)
        self.preview_table = AllocationTableWidget()
        lay.addWidget(self.preview_lbl); lay.addWidget(self.preview_table, 1)
        self.notes = QTextEdit(); self.notes.setPlaceholderText("Notes for the report (optional)")
        self.notes.setMaximumHeight(90)
        self.fee = QLineEdit(); self.fee.setPlaceholderText("Report fee (optional)")
        lay.addWidget(QLabel("Advisor notes")); lay.addWidget(self.notes)
        lay.addWidget(QLabel("Report fee")); lay.addWidget(self.fee)
        btns = QHBoxLayout()
        self.btn_edit = QPushButton("Edit"); self.btn_edit.clicked.connect(self.on_edit)
        self.btn_save = QPushButton("Save Recommendation"); self.btn_save.clicked.connect(self.on_save)
        btns.addStretch(1); btns.addWidget(self.btn_edit); btns.addWidget(self.btn_save)
        lay.addLayout(btns)
        return w

    # ---- helpers ----
    def _new_wizard(self) -> RecommendationWizard:
        return RecommendationWizard(auto_save=load_settings().app.auto_save)

    def on_data_changed(self, table: str):
        if table == CLIENTS:
            self.refresh_clients()
        elif table == SETTINGS:
            self.wizard.auto_save = load_settings().app.auto_save

    def refresh_clients(self):
        self.clientPicker.blockSignals(True)
        self.clientPicker.clear()
        self.clientPicker.addItem("(new client)", None)
        for c in list_clients():
            self.clientPicker.addItem(c.name, c.id)
        self.clientPicker.blockSignals(False)

    def on_pick_client(self, idx: int):
        if self.clientPicker.currentData() is not None:
            self.name.setText(self.clientPicker.currentText())

    def sync(self):
        """Push wizard state into the widgets."""
        f = self.wizard.form
        self.pages.setCurrentIndex(self.wizard.index)
        for s, lbl in self.step_labels.items():
            lbl.setStyleSheet(STATUS_STYLE[self.wizard.step_status(s)])

        self.risk_buttons[f.risk_profile].setChecked(True)
        self.slider.blockSignals(True); self.slider.setValue(f.horizon_years); self.slider.blockSignals(False)
        self.horizon_type.blockSignals(True)
        self.horizon_type.setCurrentIndex(self.horizon_type.findData(f.horizon_type))
        self.horizon_type.blockSignals(False)
        self.horizon_lbl.setText(self.wizard.horizon_text)
        for aid, cb in self.asset_checks.items():
            cb.setChecked(aid in f.asset_classes)
        self.strategy.setCurrentIndex(self.strategy.findData(f.strategy))

        if self.wizard.step == WizardStep.PREVIEW:
            p = self.wizard.preview()
            self.preview_lbl.setText(
                f"Client: {p['client']}\nRisk profile: {p['risk_profile']}\n"
                f"Horizon: {p['horizon']}\nStrategy: {p['strategy']}"
            )
            self.preview_table.set_allocation(p["allocation"])

        self.btn_prev.setEnabled(self.wizard.index > 0)
        self.btn_next.setVisible(self.wizard.step != WizardStep.PREVIEW)

    def on_years(self, years: int):
        self.wizard.update_horizon(years)
        self.sync()

    def on_horizon_type(self, idx: int):
        self.wizard.update_horizon(self.wizard.form.horizon_years, self.horizon_type.currentData())
        self.horizon_lbl.setText(self.wizard.horizon_text)

    def on_strategy_changed(self, idx: int):
        s = BUILTIN_STRATEGIES.get(self.strategy.currentData())
        if s:
            self.strategy_desc.setText(f"{s.description}\n\n{s.details}")

    # ---- navigation ----
    def on_next(self):
        step = self.wizard.step
        try:
            if step == WizardStep.CLIENT_INFO:
                warnings = self.wizard.submit_client_info(
                    self.name.text(), self.age.value(), self.objective.currentData(),
                    self.amount.text().replace(",", "").strip() or 0,
                )
                f = self.wizard.form
                self.risk_hint.setText(
                    f"Suggested profile: {f.risk_profile.label}. "
                    f"Suggested horizon: {self.wizard.horizon_text}."
                )
                if warnings:
                    QMessageBox.information(self, "Minimum investment", "\n".join(warnings))
            elif step == WizardStep.RISK_PROFILE:
                checked = next(p for p, rb in self.risk_buttons.items() if rb.isChecked())
                self.wizard.submit_risk_profile(checked)
            elif step == WizardStep.ASSET_CLASSES:
                self.wizard.submit_asset_classes([a for a, cb in self.asset_checks.items() if cb.isChecked()])
            elif step == WizardStep.STRATEGY:
                self.wizard.submit_strategy(self.strategy.currentData())
                if self.wizard.saved is not None:
                    publish_recommendation(self.wizard.saved)
            else:
                self.wizard.next()
        except (AegisError, OSError) as e:
            QMessageBox.warning(self, "Check the form", str(e))
            return
        self.sync()

    def on_previous(self):
        self.wizard.previous()
        self.sync()

    def on_edit(self):
        self.wizard.edit()
        self.sync()

    def on_save(self):
        try:
            self.wizard.set_details(self.notes.toPlainText(), self.fee.text())
            rec = self.wizard.finish()
        except (AegisError, OSError) as e:
            QMessageBox.critical(self, "Save failed", str(e))
            return
        publish_recommendation(rec)
        QMessageBox.information(self, "Saved", f"Saved '{rec.title}' as a draft.\n\n{strategy_description(rec)}")
        self.wizard = self._new_wizard()
        self.notes.clear(); self.fee.clear()
        self.refresh_clients()
        self.sync()
        self.finished.emit(rec)
