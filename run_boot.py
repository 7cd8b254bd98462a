# run_boot.py
import os, sys, traceback, datetime

# ---------- base dir next to the EXE (or this script) ----------
if getattr(sys, "frozen", False):
    BASE_DIR = os.path.dirname(sys.executable)
else:
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LOG_DIR = os.path.join(BASE_DIR, "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# keep the local database beside the app unless the user chose a location
os.environ.setdefault("AEGIS_DATA_DIR", os.path.join(BASE_DIR, "data"))

# ---------- redirect stdout/stderr; structlog writes to stdout ----------
log_path = os.path.join(LOG_DIR, "boot.log")
log_f = open(log_path, "w", encoding="utf-8", buffering=1, errors="replace")
sys.stdout = log_f
sys.stderr = log_f

print(f"[BOOT] starting at {datetime.datetime.now().isoformat()}")
print(f"[BOOT] BASE_DIR={BASE_DIR}")
print(f"[BOOT] AEGIS_DATA_DIR={os.environ['AEGIS_DATA_DIR']}")

import faulthandler
faulthandler.enable(log_f)  # fatal errors land in boot.log

# ---------- global excepthook -> crash file ----------
def _excepthook(exctype, value, tb):
    ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    crash_file = os.path.join(LOG_DIR, f"crash_{ts}.log")
    with open(crash_file, "w", encoding="utf-8") as f:
        traceback.print_exception(exctype, value, tb, file=f)
    print(f"[BOOT] Uncaught exception logged to {crash_file}")

sys.excepthook = _excepthook


def _error_popup():
    # only possible if Qt itself imported
    from PyQt6.QtWidgets import QApplication, QMessageBox
    app = QApplication.instance() or QApplication(sys.argv)
    QMessageBox.critical(app.activeWindow(), "Aegis Suite", f"An error occurred.\nSee log:\n{log_path}")


# ---------- START APP ----------
print("[BOOT] importing app and launching...")
try:
    from aegis_suite.app import launch_app
    launch_app()
    print("[BOOT] app exited normally")
except Exception:
    _excepthook(*sys.exc_info())
    try:
        _error_popup()
    except Exception as e:
        print(f"[BOOT] failed to show error popup: {e}")
    sys.exit(1)
finally:
    log_f.flush()
    log_f.close()
