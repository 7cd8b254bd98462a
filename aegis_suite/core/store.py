# aegis_suite/core/store.py
"""
Local database: one JSON file per record, one directory per table.

    DATA_DIR/recommendations/<id>.json
    DATA_DIR/clients/<id>.json
    DATA_DIR/assets/<id>.json

Ids are integers, auto-incremented per table (max existing id + 1).
"""
from __future__ import annotations
import os, json, datetime
from dataclasses import dataclass, asdict, field, fields
from typing import Optional, List, Dict, Any, Iterator

import structlog

from . import config
from .asset_classes import DEFAULT_ASSETS
from .investment import parse_risk_profile
from .strategies import AllocationSlice

log = structlog.get_logger(__name__)

RECOMMENDATIONS = "recommendations"
CLIENTS = "clients"
ASSETS = "assets"
TABLES = (RECOMMENDATIONS, CLIENTS, ASSETS)

STATUS_DRAFT = "Draft"
STATUS_FINAL = "Final"
STATUSES = (STATUS_DRAFT, STATUS_FINAL)

SORT_OPTIONS = ("date-desc", "date-asc", "name-asc", "name-desc")


def _now() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


@dataclass
class Recommendation:
    title: str
    risk_profile: str                 # "Conservative" | "Moderate" | "Aggressive"
    horizon: str                      # "5 years (Medium Term)"
    strategy: str                     # display name
    allocation: List[AllocationSlice] = field(default_factory=list)
    id: Optional[int] = None
    created_at: str = field(default_factory=_now)
    client_name: str = ""
    client_age: Optional[int] = None
    objective: Optional[str] = None
    investment_amount: float = 0.0
    horizon_years: Optional[int] = None
    strategy_id: Optional[str] = None
    asset_classes: List[str] = field(default_factory=list)
    status: str = STATUS_DRAFT
    report_fee: Optional[float] = None
    notes: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, obj: dict) -> "Recommendation":
        obj = _known(cls, obj)
        obj["allocation"] = [
            a if isinstance(a, AllocationSlice) else AllocationSlice.from_dict(a)
            for a in obj.get("allocation") or []
        ]
        return cls(**obj)


@dataclass
class Client:
    name: str = ""
    id: Optional[int] = None
    email: str = ""
    phone: str = ""
    birth_date: str = ""
    tax_id: str = ""
    address: str = ""
    notes: str = ""
    created_at: str = field(default_factory=lambda: datetime.date.today().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.date.today().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, obj: dict) -> "Client":
        return cls(**_known(cls, obj))


@dataclass
class Asset:
    name: str
    type: str
    category: str
    id: Optional[int] = None
    ticker: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, obj: dict) -> "Asset":
        return cls(**_known(cls, obj))


def _known(cls, obj: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in obj.items() if k in names}


RECORD_TYPES = {RECOMMENDATIONS: Recommendation, CLIENTS: Client, ASSETS: Asset}

def parse_id(value) -> Optional[int]:
    """Stored ids are positive ints; digit strings are accepted. None means 'assign one'."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid record id: {value!r}")
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, str) and value.isdigit() and int(value) > 0:
        return int(value)
    raise ValueError(f"Invalid record id: {value!r}")


# ---------- generic table helpers ----------

def _table_dir(table: str) -> str:
    if table not in TABLES:
        raise ValueError(f"Unknown table: {table}")
    d = os.path.join(config.DATA_DIR, table)
    os.makedirs(d, exist_ok=True)
    return d

def _path(table: str, rid: int) -> str:
    return os.path.join(_table_dir(table), f"{int(rid)}.json")

def _ids(table: str) -> List[int]:
    out = []
    for name in os.listdir(_table_dir(table)):
        stem, ext = os.path.splitext(name)
        if ext == ".json" and stem.isdigit():
            out.append(int(stem))
    return sorted(out)

def _next_id(table: str) -> int:
    ids = _ids(table)
    return (ids[-1] + 1) if ids else 1

def _write(table: str, rid: int, obj: Dict[str, Any]):
    with open(_path(table, rid), "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)

def _read(table: str, rid: int) -> Optional[Dict[str, Any]]:
    p = _path(table, rid)
    if not os.path.exists(p): return None
    with open(p, "r", encoding="utf-8") as f:
        return json.load(f)

def iter_rows(table: str) -> Iterator[Dict[str, Any]]:
    """Raw dicts for every readable record in a table, id order."""
    for rid in _ids(table):
        try:
            obj = _read(table, rid)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.warning("db.corrupt_record", table=table, id=rid, error=str(e))
            continue
        if obj is None:
            continue
        if not isinstance(obj, dict):
            log.warning("db.corrupt_record", table=table, id=rid, error="record is not an object")
            continue
        obj["id"] = rid
        yield obj

def _records(table: str) -> list:
    """Typed records for a table; rows that do not fit the record type are skipped."""
    cls = RECORD_TYPES[table]
    out = []
    for obj in iter_rows(table):
        try:
            out.append(cls.from_dict(obj))
        except (TypeError, KeyError, ValueError) as e:
            log.warning("db.corrupt_record", table=table, id=obj["id"], error=str(e))
    return out

def count(table: str) -> int:
    return len(_ids(table))

def clear_table(table: str) -> int:
    n = 0
    for rid in _ids(table):
        os.remove(_path(table, rid))
        n += 1
    log.info("db.table_cleared", table=table, removed=n)
    return n

def _delete(table: str, rid: int) -> bool:
    p = _path(table, rid)
    if not os.path.exists(p):
        return False
    os.remove(p)
    log.info("db.deleted", table=table, id=rid)
    return True

def bulk_insert(table: str, rows: List[Dict[str, Any]]) -> int:
    """Write raw rows keeping their ids; rows without an id get the next free one."""
    n = 0
    for row in rows:
        row = dict(row)
        rid = parse_id(row.get("id"))
        if rid is None:
            rid = _next_id(table)
        row["id"] = rid
        _write(table, row["id"], row)
        n += 1
    return n


# ---------- database bootstrap ----------

def initialize_db() -> int:
    """Seed the assets table when empty. Returns the number of assets added."""
    for t in TABLES:
        _table_dir(t)
    if count(ASSETS) > 0:
        log.debug("db.already_initialized", assets=count(ASSETS))
        return 0
    for name, typ, cat, ticker, desc in DEFAULT_ASSETS:
        save_asset(Asset(name=name, type=typ, category=cat, ticker=ticker, description=desc))
    log.info("db.seeded", assets=len(DEFAULT_ASSETS))
    return len(DEFAULT_ASSETS)


# ---------- recommendations ----------

def save_recommendation(r: Recommendation) -> Recommendation:
    if r.status not in STATUSES:
        raise ValueError(f"Invalid status: {r.status}")
    if r.id is None:
        r.id = _next_id(RECOMMENDATIONS)
    _write(RECOMMENDATIONS, r.id, r.to_dict())
    log.info("recommendation.saved", id=r.id, strategy=r.strategy, status=r.status)
    return r

def load_recommendation(rid: int) -> Optional[Recommendation]:
    obj = _read(RECOMMENDATIONS, rid)
    if obj is None: return None
    obj["id"] = int(rid)
    return Recommendation.from_dict(obj)

def list_recommendations() -> List[Recommendation]:
    out = _records(RECOMMENDATIONS)
    out.sort(key=lambda x: x.created_at, reverse=True)
    return out

def delete_recommendation(rid: int) -> bool:
    return _delete(RECOMMENDATIONS, rid)

def clear_recommendations() -> int:
    return clear_table(RECOMMENDATIONS)

def count_recommendations() -> int:
    return count(RECOMMENDATIONS)

def set_status(rid: int, status: str) -> Optional[Recommendation]:
    if status not in STATUSES:
        raise ValueError(f"Invalid status: {status}")
    r = load_recommendation(rid)
    if r is None:
        return None
    r.status = status
    return save_recommendation(r)

def recent_recommendations(limit: int = 5) -> List[Recommendation]:
    return list_recommendations()[:limit]

def query_recommendations(
    search: str = "",
    risk_profile: Optional[str] = "all",
    status: Optional[str] = None,
    sort_by: str = "date-desc",
) -> List[Recommendation]:
    """History view query: free-text search, risk/status filters, sort."""
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {sort_by}")
    wanted = None
    if risk_profile and risk_profile != "all":
        wanted = parse_risk_profile(risk_profile)

    term = (search or "").strip().lower()
    out = []
    for r in list_recommendations():
        if term and not any(term in (v or "").lower() for v in (r.title, r.client_name, r.strategy)):
            continue
        if wanted is not None:
            try:
                if parse_risk_profile(r.risk_profile) != wanted:
                    continue
            except ValueError:
                continue
        if status and status != "all" and r.status != status:
            continue
        out.append(r)

    if sort_by == "date-asc":
        out.sort(key=lambda x: x.created_at)
    elif sort_by == "name-asc":
        out.sort(key=lambda x: x.title.lower())
    elif sort_by == "name-desc":
        out.sort(key=lambda x: x.title.lower(), reverse=True)
    return out


# ---------- clients ----------

def new_client() -> Client:
    return Client()

def save_client(c: Client) -> Client:
    c.updated_at = datetime.date.today().isoformat()
    if c.id is None:
        c.id = _next_id(CLIENTS)
    _write(CLIENTS, c.id, c.to_dict())
    log.info("client.saved", id=c.id)
    return c

def load_client(cid: int) -> Optional[Client]:
    obj = _read(CLIENTS, cid)
    if obj is None: return None
    obj["id"] = int(cid)
    return Client.from_dict(obj)

def list_clients() -> List[Client]:
    out = _records(CLIENTS)
    # sort by updated desc
    out.sort(key=lambda x: x.updated_at, reverse=True)
    return out

def delete_client(cid: int) -> bool:
    return _delete(CLIENTS, cid)

def search_clients(term: str) -> List[Client]:
    term = (term or "").strip()
    if not term:
        return list_clients()
    low = term.lower()
    return [
        c for c in list_clients()
        if low in (c.name or "").lower()
        or low in (c.email or "").lower()
        or term in (c.phone or "")
        or term in (c.tax_id or "")
    ]


# ---------- assets ----------

def save_asset(a: Asset) -> Asset:
    if a.id is None:
        a.id = _next_id(ASSETS)
    _write(ASSETS, a.id, a.to_dict())
    return a

def load_asset(aid: int) -> Optional[Asset]:
    obj = _read(ASSETS, aid)
    if obj is None: return None
    obj["id"] = int(aid)
    return Asset.from_dict(obj)

def list_assets(category: Optional[str] = None) -> List[Asset]:
    out = _records(ASSETS)
    if category:
        out = [a for a in out if a.category == category]
    return out

def delete_asset(aid: int) -> bool:
    return _delete(ASSETS, aid)
