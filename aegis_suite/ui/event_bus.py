# aegis_suite/ui/event_bus.py
from PyQt6.QtCore import QObject, pyqtSignal

SETTINGS = "settings"

class EventBus(QObject):
    dataChanged = pyqtSignal(str)               # table name that changed, or SETTINGS
    recommendationSaved = pyqtSignal(object)    # emits a Recommendation

bus = EventBus()

def notify_changed(table: str):
    bus.dataChanged.emit(table)

def publish_recommendation(rec):
    bus.dataChanged.emit("recommendations")
    bus.recommendationSaved.emit(rec)
