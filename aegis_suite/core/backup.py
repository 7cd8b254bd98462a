# aegis_suite/core/backup.py
"""
Backup / restore of the whole local database and CSV exports.

Backup file layout (version 1):
{
  "version": 1,
  "timestamp": "2026-01-31T18:22:05",
  "data": {"recommendations": [...], "assets": [...], "clients": [...]}
}
"""
from __future__ import annotations
import os, json, csv, datetime
from dataclasses import dataclass, fields
from typing import Optional, List

import structlog

from . import store
from .errors import BackupError, ExportError

log = structlog.get_logger(__name__)

BACKUP_VERSION = 1


@dataclass
class BackupInfo:
    path: str
    timestamp: str
    size_kb: float
    items: int


def default_backup_name(today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return f"aegis_backup_{today.isoformat()}.json"


def create_backup(path: str) -> BackupInfo:
    data = {t: list(store.iter_rows(t)) for t in store.TABLES}
    ts = datetime.datetime.now().isoformat(timespec="seconds")
    payload = {"version": BACKUP_VERSION, "timestamp": ts, "data": data}

    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    info = BackupInfo(
        path=path,
        timestamp=ts,
        size_kb=round(os.path.getsize(path) / 1024, 2),
        items=sum(len(rows) for rows in data.values()),
    )
    log.info("backup.created", path=path, items=info.items, size_kb=info.size_kb)
    return info


def read_backup(path: str) -> dict:
    """Load and validate a backup file without touching the database."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        raise BackupError("Backup file not found", path)
    except (OSError, UnicodeDecodeError) as e:
        raise BackupError(f"Cannot read backup file: {e}", path)
    except json.JSONDecodeError as e:
        raise BackupError(f"Backup file is not valid JSON: {e}", path)

    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise BackupError("Invalid backup format: missing 'data' section", path)
    if payload.get("version") != BACKUP_VERSION:
        raise BackupError(f"Unsupported backup version: {payload.get('version')}", path)
    for table, rows in payload["data"].items():
        if table not in store.TABLES:
            raise BackupError(f"Unknown table in backup: {table}", path)
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise BackupError(f"Table '{table}' must be a list of records", path)
        for i, row in enumerate(rows):
            problem = _row_problem(table, row)
            if problem:
                raise BackupError(f"Invalid record #{i + 1} in '{table}': {problem}", path)
    return payload


def _row_problem(table: str, row: dict) -> Optional[str]:
    """Why a backup row could not be stored and read back, or None when it can."""
    try:
        store.parse_id(row.get("id"))
    except ValueError as e:
        return str(e)
    cls = store.RECORD_TYPES[table]
    try:
        rec = cls.from_dict(row)
    except (TypeError, KeyError, ValueError) as e:
        return str(e)
    for f in fields(cls):
        if f.type == "str" and not isinstance(getattr(rec, f.name), str):
            return f"field '{f.name}' must be text"
    return None


def restore_backup(path: str) -> dict:
    """
    Replace every table present in the backup with the backup's rows.
    Tables missing from the file are left alone. Returns {table: restored}.
    """
    payload = read_backup(path)
    restored = {}
    for table, rows in payload["data"].items():
        store.clear_table(table)
        restored[table] = store.bulk_insert(table, rows)
    log.info("backup.restored", path=path, **restored)
    return restored


# ---------- CSV ----------

RECOMMENDATION_COLUMNS = ["ID", "Title", "Date", "Client", "Risk Profile", "Horizon", "Strategy", "Status"]
CLIENT_COLUMNS = ["ID", "Name", "Email", "Phone", "Tax ID", "Registered"]


def _date_only(ts: str) -> str:
    return (ts or "")[:10]


def _recommendation_rows() -> List[list]:
    return [
        [r.id, r.title, _date_only(r.created_at), r.client_name, r.risk_profile,
         r.horizon, r.strategy, r.status]
        for r in store.list_recommendations()
    ]


def _client_rows() -> List[list]:
    return [
        [c.id, c.name, c.email, c.phone, c.tax_id, _date_only(c.created_at)]
        for c in store.list_clients()
    ]


def default_csv_name(kind: str, today: Optional[datetime.date] = None) -> str:
    today = today or datetime.date.today()
    return f"{kind}_{today.isoformat()}.csv"


def export_csv(kind: str, path: str) -> int:
    """Export recommendations or clients to CSV. Returns rows written."""
    if kind == store.RECOMMENDATIONS:
        cols, rows = RECOMMENDATION_COLUMNS, _recommendation_rows()
    elif kind == store.CLIENTS:
        cols, rows = CLIENT_COLUMNS, _client_rows()
    else:
        raise ExportError(f"Cannot export '{kind}' to CSV")

    if not rows:
        raise ExportError(f"There are no {kind} to export")

    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(cols)
        for r in rows: w.writerow(r)
    log.info("csv.exported", kind=kind, path=path, rows=len(rows))
    return len(rows)
