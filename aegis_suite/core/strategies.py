"""
Allocation Strategies

Built-in strategy catalog and the per-profile slice tables used to build a
recommendation's asset allocation.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .investment import RiskProfile, parse_risk_profile


STOCKS_COLOR = "#4f46e5"
BONDS_COLOR = "#10b981"
INTERMEDIATE_COLOR = "#06b6d4"
GOLD_COLOR = "#f59e0b"
CASH_COLOR = "#6b7280"


@dataclass
class AllocationSlice:
    """One asset-class line of an allocation."""

    name: str
    percent: float
    color: str = CASH_COLOR

    def to_dict(self) -> dict:
        return {"name": self.name, "percent": self.percent, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict) -> "AllocationSlice":
        return cls(
            name=data["name"],
            percent=float(data["percent"]),
            color=data.get("color", CASH_COLOR),
        )


@dataclass
class AllocationStrategy:
    """A named strategy with per-profile allocation tables."""

    id: str
    name: str
    description: str
    details: str = ""
    rebalancing: str = ""
    # profile -> [(asset name, percent, colour)]
    tables: Dict[RiskProfile, List[Tuple[str, float, str]]] = field(default_factory=dict)

    def __post_init__(self):
        for profile, rows in self.tables.items():
            total = sum(p for _, p, _ in rows)
            if abs(total - 100) > 0.01:
                raise ValueError(f"{self.id}/{profile.value} sums to {total}, expected 100")


def _same_for_all(rows):
    return {p: list(rows) for p in RiskProfile}


CUSTOM_TABLES = {
    RiskProfile.CONSERVATIVE: [
        ("Stocks", 20, STOCKS_COLOR),
        ("Bonds", 50, BONDS_COLOR),
        ("Alternatives", 10, GOLD_COLOR),
        ("Cash", 20, CASH_COLOR),
    ],
    RiskProfile.MODERATE: [
        ("Stocks", 40, STOCKS_COLOR),
        ("Bonds", 35, BONDS_COLOR),
        ("Alternatives", 15, GOLD_COLOR),
        ("Cash", 10, CASH_COLOR),
    ],
    RiskProfile.AGGRESSIVE: [
        ("Stocks", 60, STOCKS_COLOR),
        ("Bonds", 20, BONDS_COLOR),
        ("Alternatives", 15, GOLD_COLOR),
        ("Cash", 5, CASH_COLOR),
    ],
}


BUILTIN_STRATEGIES: Dict[str, AllocationStrategy] = {
    "permanent": AllocationStrategy(
        id="permanent",
        name="Permanent Portfolio",
        description="Equal split between stocks, long-term bonds, gold and cash. "
                    "Built to hold up in every economic regime.",
        details="Low volatility, moderate returns. Suits conservative investors who value stability.",
        rebalancing="Rebalance once a year, or whenever any asset class drifts more than 10% "
                    "from its target. Infrequent rebalancing is part of the strategy.",
        tables=_same_for_all([
            ("Stocks", 25, STOCKS_COLOR),
            ("Long-Term Bonds", 25, BONDS_COLOR),
            ("Gold", 25, GOLD_COLOR),
            ("Cash", 25, CASH_COLOR),
        ]),
    ),
    "allweather": AllocationStrategy(
        id="allweather",
        name="All Weather Portfolio",
        description="Risk-parity style mix balancing growth, inflation, deflation and recession scenarios.",
        details="Moderate volatility, moderate returns. Fits most investment horizons.",
        tables={
            RiskProfile.CONSERVATIVE: [
                ("Stocks", 20, STOCKS_COLOR),
                ("Long-Term Bonds", 40, BONDS_COLOR),
                ("Intermediate Bonds", 15, INTERMEDIATE_COLOR),
                ("Gold", 15, GOLD_COLOR),
                ("Cash", 10, CASH_COLOR),
            ],
            RiskProfile.MODERATE: [
                ("Stocks", 30, STOCKS_COLOR),
                ("Long-Term Bonds", 40, BONDS_COLOR),
                ("Intermediate Bonds", 15, INTERMEDIATE_COLOR),
                ("Gold", 7.5, GOLD_COLOR),
                ("Cash", 7.5, CASH_COLOR),
            ],
            RiskProfile.AGGRESSIVE: [
                ("Stocks", 40, STOCKS_COLOR),
                ("Long-Term Bonds", 30, BONDS_COLOR),
                ("Intermediate Bonds", 15, INTERMEDIATE_COLOR),
                ("Gold", 7.5, GOLD_COLOR),
                ("Cash", 7.5, CASH_COLOR),
            ],
        },
    ),
    "traditional": AllocationStrategy(
        id="traditional",
        name="Traditional 60/40",
        description="Classic 60% stocks / 40% bonds split, the standard balanced portfolio.",
        details="Moderate volatility, moderate returns. A time-tested approach for long-term investors.",
        rebalancing="Review and rebalance quarterly, or when the stock/bond split drifts more than 5% "
                    "from target (for example stocks above 65% or below 55%).",
        tables={
            RiskProfile.CONSERVATIVE: [
                ("Stocks", 40, STOCKS_COLOR),
                ("Bonds", 50, BONDS_COLOR),
                ("Cash", 10, CASH_COLOR),
            ],
            RiskProfile.MODERATE: [
                ("Stocks", 60, STOCKS_COLOR),
                ("Bonds", 35, BONDS_COLOR),
                ("Cash", 5, CASH_COLOR),
            ],
            RiskProfile.AGGRESSIVE: [
                ("Stocks", 75, STOCKS_COLOR),
                ("Bonds", 20, BONDS_COLOR),
                ("Cash", 5, CASH_COLOR),
            ],
        },
    ),
    "markowitz": AllocationStrategy(
        id="markowitz",
        name="Markowitz Optimization",
        description="Mean-variance optimization seeking the highest expected return for a given level of risk.",
        details="Variable volatility, potentially high returns. Based on Modern Portfolio Theory.",
        tables=CUSTOM_TABLES,
    ),
    "riskparity": AllocationStrategy(
        id="riskparity",
        name="Risk Parity",
        description="Balances the risk contribution of each asset class in the portfolio.",
        details="Controlled volatility, balanced returns.",
        tables=CUSTOM_TABLES,
    ),
    "blacklitterman": AllocationStrategy(
        id="blacklitterman",
        name="Black-Litterman",
        description="Blends market-implied returns with the investor's own views on selected assets.",
        details="Adjustable volatility, personalised returns.",
        tables=CUSTOM_TABLES,
    ),
    "equalweight": AllocationStrategy(
        id="equalweight",
        name="Equal Weight",
        description="Gives every asset class the same weight regardless of volatility or correlation.",
        details="Average volatility, diversified returns. Avoids concentration.",
        tables=CUSTOM_TABLES,
    ),
    "momentum": AllocationStrategy(
        id="momentum",
        name="Momentum and Rotation",
        description="Tilts capital towards asset classes with the strongest recent trend.",
        details="Potentially high volatility and returns. Tactical and dynamic.",
        rebalancing="Review market trends monthly and rotate tactically every 1-3 months depending on "
                    "signal strength. Set clear entry and exit rules based on moving averages and "
                    "relative strength.",
        tables=CUSTOM_TABLES,
    ),
    "minimumvariance": AllocationStrategy(
        id="minimumvariance",
        name="Minimum Variance",
        description="Builds the portfolio with the lowest total variance, regardless of expected return.",
        details="Low volatility, potentially lower returns.",
        tables=CUSTOM_TABLES,
    ),
    "custom": AllocationStrategy(
        id="custom",
        name="Custom Allocation",
        description="Allocation tailored to the client's risk profile and investment horizon.",
        details="Volatility and returns depend on your selections. Maximum flexibility.",
        tables=CUSTOM_TABLES,
    ),
}

DEFAULT_STRATEGY = "allweather"


def get_strategy(strategy_id: str) -> Optional[AllocationStrategy]:
    return BUILTIN_STRATEGIES.get((strategy_id or "").strip().lower())


def strategy_name(strategy_id: str) -> str:
    s = get_strategy(strategy_id)
    return s.name if s else BUILTIN_STRATEGIES["custom"].name


def strategy_id_for_name(name: str) -> Optional[str]:
    for key, s in BUILTIN_STRATEGIES.items():
        if s.name == name:
            return key
    return None


def build_allocation(strategy_id: str, risk_profile: Union[RiskProfile, str]) -> List[AllocationSlice]:
    """Allocation slices for a strategy/profile pair. Unknown ids use the custom table."""
    profile = parse_risk_profile(risk_profile)
    s = get_strategy(strategy_id) or BUILTIN_STRATEGIES["custom"]
    return [AllocationSlice(name, pct, color) for name, pct, color in s.tables[profile]]


def get_strategy_choices() -> List[tuple]:
    """(id, display name) pairs for dropdowns."""
    return [(key, s.name) for key, s in BUILTIN_STRATEGIES.items()]
