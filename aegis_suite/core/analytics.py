"""
Recommendation statistics for the dashboard, history and analysis views.

Everything is computed from a list of Recommendation records via a pandas
DataFrame; an empty list yields zeroed statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .investment import RiskProfile
from .store import Recommendation, STATUSES

TIMEFRAMES = ("all", "month", "quarter", "year")

_OFFSETS = {
    "month": pd.DateOffset(months=1),
    "quarter": pd.DateOffset(months=3),
    "year": pd.DateOffset(years=1),
}


@dataclass
class HistoryStatistics:
    total: int = 0
    by_risk_profile: Dict[str, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)
    by_strategy: Dict[str, int] = field(default_factory=dict)
    distinct_strategies: int = 0
    total_invested: float = 0.0
    average_allocation: Dict[str, float] = field(default_factory=dict)


def to_frame(recs: List[Recommendation]) -> pd.DataFrame:
    rows = [
        {
            "id": r.id,
            "created_at": pd.to_datetime(r.created_at, errors="coerce"),
            "risk_profile": r.risk_profile or "Undefined",
            "strategy": r.strategy or "Undefined",
            "status": r.status,
            "investment_amount": float(r.investment_amount or 0.0),
        }
        for r in recs
    ]
    cols = ["id", "created_at", "risk_profile", "strategy", "status", "investment_amount"]
    return pd.DataFrame(rows, columns=cols)


def filter_by_timeframe(recs: List[Recommendation], timeframe: str = "all",
                        now: Optional[datetime] = None) -> List[Recommendation]:
    """Keep recommendations created within the last month/quarter/year."""
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unknown timeframe: {timeframe}")
    if timeframe == "all" or not recs:
        return list(recs)
    cutoff = pd.Timestamp(now or datetime.now()) - _OFFSETS[timeframe]
    df = to_frame(recs)
    keep = set(df.index[df["created_at"] >= cutoff])
    return [r for i, r in enumerate(recs) if i in keep]


def summarize(recs: List[Recommendation]) -> HistoryStatistics:
    stats = HistoryStatistics(
        by_risk_profile={p.label: 0 for p in RiskProfile},
        by_status={s: 0 for s in STATUSES},
    )
    if not recs:
        return stats

    df = to_frame(recs)
    stats.total = len(df)
    for k, v in df["risk_profile"].value_counts().items():
        stats.by_risk_profile[k] = int(v)
    for k, v in df["status"].value_counts().items():
        stats.by_status[k] = int(v)
    stats.by_strategy = {k: int(v) for k, v in df["strategy"].value_counts().items()}
    stats.distinct_strategies = int(df["strategy"].nunique())
    stats.total_invested = float(df["investment_amount"].sum())
    stats.average_allocation = average_allocation(recs)
    return stats


def average_allocation(recs: List[Recommendation]) -> Dict[str, float]:
    """Mean percent per asset-class name; a missing class counts as 0 for that record."""
    rows = [{s.name: s.percent for s in r.allocation} for r in recs if r.allocation]
    if not rows:
        return {}
    means = pd.DataFrame(rows).fillna(0.0).mean()
    return {k: round(float(v), 2) for k, v in means.sort_values(ascending=False).items()}


def profile_distribution(recs: List[Recommendation]) -> List[Tuple[str, int, int]]:
    """(profile label, count, rounded percent of total) for each risk profile."""
    stats = summarize(recs)
    out = []
    for p in RiskProfile:
        n = stats.by_risk_profile.get(p.label, 0)
        pct = int(n * 100 / stats.total + 0.5) if stats.total else 0
        out.append((p.label, n, pct))
    return out
