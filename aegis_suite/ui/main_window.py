from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QHBoxLayout, QListWidget,
    QListWidgetItem, QStackedWidget, QToolBar, QLabel
)
import sys

import structlog

from .views.dashboard_view import DashboardView
from .views.recommendation_view import RecommendationView
from .views.history_view import HistoryView
from .views.client_view import ClientView
from .views.analysis_view import AnalysisView
from .views.settings_view import SettingsView
from ..core.store import initialize_db
from ..core.config import load_settings

log = structlog.get_logger(__name__)

SECTIONS = [
    ("Dashboard", DashboardView),
    ("New Recommendation", RecommendationView),
    ("History", HistoryView),
    ("Clients", ClientView),
    ("Analysis", AnalysisView),
    ("Settings", SettingsView),
]

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        settings = load_settings()
        company = settings.branding.company_name or settings.app.company_name
        self.setWindowTitle(f"Aegis Suite - {company}" if company else "Aegis Suite")
        self.resize(1200, 800)

        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        if settings.app.advisor_name:
            toolbar.addWidget(QLabel(f"  Advisor: {settings.app.advisor_name}"))

        central = QWidget()
        outer = QHBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)

        self.sidebar = QListWidget()
        self.sidebar.setFixedWidth(220)
        self.sidebar.setStyleSheet("QListWidget { border-right: 1px solid #ddd; }")
        for name, _ in SECTIONS:
            self.sidebar.addItem(QListWidgetItem(name))

        self.stack = QStackedWidget()
        self.views = []
        for _, view_cls in SECTIONS:
            view = view_cls()
            self.views.append(view)
            self.stack.addWidget(view)

        self.sidebar.currentRowChanged.connect(self.stack.setCurrentIndex)
        self.sidebar.setCurrentRow(0)

        # dashboard quick action jumps to the wizard
        self.views[0].newRequested.connect(lambda: self.sidebar.setCurrentRow(1))
        # wizard finished -> history
        self.views[1].finished.connect(lambda _rec: self.sidebar.setCurrentRow(2))

        outer.addWidget(self.sidebar)
        outer.addWidget(self.stack, 1)
        self.setCentralWidget(central)

def launch_app():
    seeded = initialize_db()
    log.info("app.start", seeded_assets=seeded)
    app = QApplication(sys.argv)
    win = MainWindow()
    win.show()
    sys.exit(app.exec())
