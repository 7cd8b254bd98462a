"""Asset class taxonomy.

Two layers:
- ASSET_CLASS_CATALOG: the selectable asset classes shown in the wizard's
  asset-class step, each tagged with a broad AssetCategory.
- DEFAULT_ASSETS: the investable assets seeded into the local database the
  first time it is initialized.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set


class AssetCategory(Enum):
    """Broad asset categories."""

    STOCKS = "Stocks"
    BONDS = "Bonds"
    ALTERNATIVES = "Alternatives"
    CASH = "Cash"
    CRYPTO = "Crypto"


@dataclass(frozen=True)
class AssetClassInfo:
    id: str
    name: str
    description: str
    category: AssetCategory


ASSET_CLASS_CATALOG: Dict[str, AssetClassInfo] = {
    a.id: a for a in [
        # Stocks
        AssetClassInfo("us-large-cap", "US Large Cap", "Large US companies with market cap > $10B", AssetCategory.STOCKS),
        AssetClassInfo("us-mid-cap", "US Mid Cap", "Medium US companies with market cap $2-10B", AssetCategory.STOCKS),
        AssetClassInfo("us-small-cap", "US Small Cap", "Small US companies with market cap < $2B", AssetCategory.STOCKS),
        AssetClassInfo("international-developed", "International Developed", "Stocks from developed markets outside the US", AssetCategory.STOCKS),
        AssetClassInfo("emerging-markets", "Emerging Markets", "Stocks from developing economies", AssetCategory.STOCKS),

        # Bonds
        AssetClassInfo("us-treasury", "US Treasury", "US government bonds", AssetCategory.BONDS),
        AssetClassInfo("corporate-bonds", "Corporate Bonds", "Debt securities issued by corporations", AssetCategory.BONDS),
        AssetClassInfo("municipal-bonds", "Municipal Bonds", "Bonds issued by states, cities, and counties", AssetCategory.BONDS),
        AssetClassInfo("international-bonds", "International Bonds", "Bonds issued by foreign governments and corporations", AssetCategory.BONDS),
        AssetClassInfo("tips", "TIPS", "Treasury Inflation-Protected Securities", AssetCategory.BONDS),

        # Alternatives
        AssetClassInfo("real-estate", "Real Estate", "REITs and real estate investments", AssetCategory.ALTERNATIVES),
        AssetClassInfo("commodities", "Commodities", "Raw materials like gold, oil, and agricultural products", AssetCategory.ALTERNATIVES),
        AssetClassInfo("private-equity", "Private Equity", "Investments in private companies", AssetCategory.ALTERNATIVES),
        AssetClassInfo("hedge-funds", "Hedge Funds", "Alternative investment using pooled funds", AssetCategory.ALTERNATIVES),

        # Cash
        AssetClassInfo("money-market", "Money Market", "Short-term, high-quality investments", AssetCategory.CASH),
        AssetClassInfo("certificates-of-deposit", "Certificates of Deposit", "Time deposits with fixed term and interest rate", AssetCategory.CASH),
    ]
}

DEFAULT_SELECTION: List[str] = [
    "us-large-cap",
    "us-treasury",
    "corporate-bonds",
    "real-estate",
]

WIZARD_CATEGORIES = [
    AssetCategory.STOCKS,
    AssetCategory.BONDS,
    AssetCategory.ALTERNATIVES,
    AssetCategory.CASH,
]


def get_asset_class(asset_id: str) -> Optional[AssetClassInfo]:
    return ASSET_CLASS_CATALOG.get(asset_id)


def unknown_asset_classes(asset_ids: Iterable[str]) -> List[str]:
    return [a for a in asset_ids if a not in ASSET_CLASS_CATALOG]


def classify_asset_classes(asset_ids: Iterable[str]) -> Dict[AssetCategory, Set[str]]:
    """Group known asset-class ids by category; raises on unknown ids."""
    asset_ids = list(asset_ids)
    unknown = unknown_asset_classes(asset_ids)
    if unknown:
        raise ValueError(f"Unknown asset classes: {', '.join(unknown)}")
    result: Dict[AssetCategory, Set[str]] = {c: set() for c in AssetCategory}
    for a in asset_ids:
        result[ASSET_CLASS_CATALOG[a].category].add(a)
    return result


def catalog_by_category(category: AssetCategory) -> List[AssetClassInfo]:
    return [a for a in ASSET_CLASS_CATALOG.values() if a.category == category]


# Seed rows for the assets table: (name, type, category, ticker, description)
DEFAULT_ASSETS = [
    # Stocks
    ("US Stocks - Large Cap", "Stock", "Stocks", "VOO", "Large-capitalization US companies"),
    ("US Stocks - Small Cap", "Stock", "Stocks", "IJR", "Small-capitalization US companies"),
    ("International Stocks - Developed Markets", "Stock", "Stocks", "VEA", "Stocks from developed markets outside the US"),
    ("International Stocks - Emerging Markets", "Stock", "Stocks", "VWO", "Stocks from emerging markets"),

    # Fixed income
    ("Treasury Bonds", "Fixed Income", "Government Bonds", "GOVT", "Federal government debt"),
    ("Certificates of Deposit", "Fixed Income", "Private Bonds", "", "Bank-issued time deposits"),
    ("Corporate Debentures", "Fixed Income", "Private Bonds", "LQD", "Debt securities issued by companies"),
    ("Municipal Bonds", "Fixed Income", "Private Bonds", "MUB", "Tax-advantaged state and city debt"),

    # Alternatives
    ("Real Estate Funds", "Alternative", "Real Estate", "VNQ", "Funds investing in real estate assets"),
    ("Gold", "Alternative", "Commodities", "GLD", "Precious metal used as a store of value"),

    # Crypto
    ("Bitcoin (BTC)", "Crypto", "Crypto", "", "The first and best-known cryptocurrency, a digital store of value"),
    ("Ethereum (ETH)", "Crypto", "Crypto", "", "Smart-contract and decentralized application platform"),
    ("Stablecoins", "Crypto", "Crypto", "", "Cryptocurrencies pegged to stable assets such as the dollar"),
    ("Established Altcoins", "Crypto", "Crypto", "", "Alternative cryptocurrencies with significant market cap"),

    # Cash
    ("Savings Account", "Cash", "Liquidity", "", "Traditional savings account"),
    ("Money Market Funds", "Cash", "Liquidity", "SGOV", "Funds tracking short-term interest rates"),
]


TYPE_TO_CATEGORY: Dict[str, AssetCategory] = {
    "Stock": AssetCategory.STOCKS,
    "Fixed Income": AssetCategory.BONDS,
    "Alternative": AssetCategory.ALTERNATIVES,
    "Crypto": AssetCategory.CRYPTO,
    "Cash": AssetCategory.CASH,
}


def category_for_asset_type(asset_type: str) -> AssetCategory:
    """Map a stored asset type to its category; unknown types count as alternatives."""
    return TYPE_TO_CATEGORY.get(asset_type, AssetCategory.ALTERNATIVES)
