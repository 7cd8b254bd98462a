"""
Investment rule engine.

Deterministic rule tables that turn a client's age and objective into:
- a recommended horizon (years)
- a risk profile (Conservative / Moderate / Aggressive)
- a recommended allocation strategy id
- a minimum suggested investment
- a stocks/bonds/alternatives/cash split that always sums to 100

All functions are pure; nothing here touches disk.
"""

import re
from enum import Enum
from typing import Dict, Union


class RiskProfile(Enum):
    """Client risk profiles."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class HorizonType(Enum):
    """Investment horizon buckets."""

    SHORT_TERM = "short-term"
    MEDIUM_TERM = "medium-term"
    LONG_TERM = "long-term"

    @property
    def label(self) -> str:
        return {
            HorizonType.SHORT_TERM: "Short Term",
            HorizonType.MEDIUM_TERM: "Medium Term",
            HorizonType.LONG_TERM: "Long Term",
        }[self]


OBJECTIVES: Dict[str, str] = {
    "retirement": "Retirement",
    "reserve": "Emergency Reserve",
    "education": "Education",
    "property": "Property Purchase",
    "wealth": "Wealth Growth",
    "income": "Income Generation",
    "travel": "Travel",
    "other": "Other Objective",
}

ASSET_KEYS = ("stocks", "bonds", "alternatives", "cash")

BASE_ALLOCATIONS: Dict[RiskProfile, Dict[str, int]] = {
    RiskProfile.CONSERVATIVE: {"stocks": 20, "bonds": 60, "alternatives": 10, "cash": 10},
    RiskProfile.MODERATE: {"stocks": 40, "bonds": 40, "alternatives": 15, "cash": 5},
    RiskProfile.AGGRESSIVE: {"stocks": 60, "bonds": 20, "alternatives": 15, "cash": 5},
}

STRATEGIES_BY_RISK: Dict[RiskProfile, tuple] = {
    RiskProfile.CONSERVATIVE: ("permanent", "allweather"),
    RiskProfile.MODERATE: ("allweather", "traditional"),
    RiskProfile.AGGRESSIVE: ("traditional", "custom"),
}

STRATEGY_BY_OBJECTIVE: Dict[str, str] = {
    "retirement": "allweather",
    "reserve": "permanent",
    "education": "allweather",
    "property": "traditional",
    "wealth": "custom",
    "income": "allweather",
    "travel": "traditional",
}

MINIMUM_BY_OBJECTIVE: Dict[str, float] = {
    "reserve": 10_000,
    "education": 15_000,
    "property": 50_000,
    "wealth": 20_000,
    "income": 100_000,
    "travel": 5_000,
}

YOUNG_AGE = 30
SENIOR_AGE = 55
RETIREMENT_AGE = 65


def parse_risk_profile(value: Union[RiskProfile, str]) -> RiskProfile:
    """Accept an enum, an id ("moderate") or a label ("Moderate")."""
    if isinstance(value, RiskProfile):
        return value
    key = str(value or "").strip().lower()
    for p in RiskProfile:
        if p.value == key:
            return p
    raise ValueError(f"Unknown risk profile: {value!r}")


def normalize_objective(objective: str) -> str:
    key = (objective or "").strip().lower()
    return key if key in OBJECTIVES else "other"


def recommended_horizon(age: int, objective: str) -> int:
    """Recommended horizon in years for an age/objective pair."""
    base = 10
    if age < YOUNG_AGE:
        base += 5
    elif age > SENIOR_AGE:
        base -= 5

    objective = normalize_objective(objective)
    if objective == "retirement":
        return max(RETIREMENT_AGE - age, 1)
    if objective == "reserve":
        return 1
    if objective == "education":
        return 5
    if objective == "property":
        return 7
    if objective == "wealth":
        return max(base, 10)
    if objective == "income":
        return 5
    if objective == "travel":
        return 2
    return base


def risk_score(age: int, objective: str, horizon: int) -> int:
    """0-100ish score; <33 conservative, <67 moderate, else aggressive."""
    score = 50

    if age < YOUNG_AGE:
        score += 20
    elif age > SENIOR_AGE:
        score -= 20

    if horizon < 3:
        score -= 25
    elif horizon > 10:
        score += 15

    objective = normalize_objective(objective)
    if objective == "retirement":
        if age > 50:
            score -= 15
    elif objective == "reserve":
        score -= 40
    elif objective in ("education", "travel"):
        score -= 10
    elif objective in ("property", "income"):
        score -= 5
    elif objective == "wealth":
        score += 15
    return score


def recommended_risk_profile(age: int, objective: str, horizon: int) -> RiskProfile:
    score = risk_score(age, objective, horizon)
    if score < 33:
        return RiskProfile.CONSERVATIVE
    if score < 67:
        return RiskProfile.MODERATE
    return RiskProfile.AGGRESSIVE


def recommended_strategy(risk_profile: Union[RiskProfile, str], objective: str) -> str:
    """Objective's preferred strategy when the profile allows it, else the profile's first pick."""
    try:
        profile = parse_risk_profile(risk_profile)
    except ValueError:
        return "allweather"

    allowed = STRATEGIES_BY_RISK[profile]
    preferred = STRATEGY_BY_OBJECTIVE.get(normalize_objective(objective))
    if preferred in allowed:
        return preferred
    return allowed[0]


def minimum_investment(objective: str, age: int) -> float:
    objective = normalize_objective(objective)
    if objective == "retirement":
        return float(max(10_000, (age - 20) * 5_000))
    return float(MINIMUM_BY_OBJECTIVE.get(objective, 10_000))


def normalize_to_100(allocation: Dict[str, float]) -> Dict[str, int]:
    """
    Scale to a total of 100 and round to integers.

    Rounding residue goes to the largest class so the result always sums to
    exactly 100.
    """
    total = sum(allocation.values())
    if total <= 0:
        raise ValueError("Allocation total must be positive")
    if total == 100 and all(float(v).is_integer() for v in allocation.values()):
        return {k: int(v) for k, v in allocation.items()}

    factor = 100 / total
    out = {k: int(round(v * factor)) for k, v in allocation.items()}
    residue = 100 - sum(out.values())
    if residue:
        largest = max(out, key=lambda k: (out[k], -list(out).index(k)))
        out[largest] += residue
    return out


def recommended_allocation(risk_profile: Union[RiskProfile, str], age: int, objective: str) -> Dict[str, int]:
    """
    Stocks / bonds / alternatives / cash percentages for a client.

    Starts from the profile's base split, applies age then objective
    adjustments (each clamped), then normalizes to 100.
    """
    try:
        profile = parse_risk_profile(risk_profile)
    except ValueError:
        profile = RiskProfile.MODERATE
    a = dict(BASE_ALLOCATIONS[profile])

    if age < YOUNG_AGE:
        a["stocks"] = min(a["stocks"] + 10, 80)
        a["bonds"] = max(a["bonds"] - 10, 10)
    elif age > SENIOR_AGE:
        a["stocks"] = max(a["stocks"] - 10, 10)
        a["bonds"] = min(a["bonds"] + 10, 70)

    objective = normalize_objective(objective)
    if objective == "retirement":
        if age > 50:
            a["stocks"] = max(a["stocks"] - 15, 10)
            a["bonds"] = min(a["bonds"] + 15, 70)
    elif objective == "reserve":
        a["stocks"] = max(a["stocks"] - 15, 0)
        a["cash"] = min(a["cash"] + 15, 50)
    elif objective == "wealth":
        a["stocks"] = min(a["stocks"] + 10, 80)
        a["cash"] = max(a["cash"] - 5, 0)
    elif objective == "income":
        a["alternatives"] = min(a["alternatives"] + 10, 30)
        a["stocks"] = max(a["stocks"] - 5, 10)

    return normalize_to_100(a)


# ---- horizon helpers ----

MIN_HORIZON_YEARS = 1
MAX_HORIZON_YEARS = 30


def classify_horizon(years: int) -> HorizonType:
    if years <= 3:
        return HorizonType.SHORT_TERM
    if years < 10:
        return HorizonType.MEDIUM_TERM
    return HorizonType.LONG_TERM


def horizon_label(years: int, horizon_type: HorizonType = None) -> str:
    """e.g. '5 years (Medium Term)'."""
    horizon_type = horizon_type or classify_horizon(years)
    unit = "year" if years == 1 else "years"
    return f"{years} {unit} ({horizon_type.label})"


_YEARS_RE = re.compile(r"(\d+)\s*(?:years?|anos?)", re.IGNORECASE)


def parse_horizon_years(text: str, default: int = 5) -> int:
    """Pull the year count back out of a stored horizon label."""
    m = _YEARS_RE.search(text or "")
    return int(m.group(1)) if m else default
