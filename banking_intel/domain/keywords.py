"""
Static classification tables used by the signal extractors.

All matching is case-insensitive substring matching against upper-cased text.
Lists are English/US-merchant specific.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from banking_intel.domain.models import Elasticity

# Leading descriptor tokens stripped when deriving a merchant name
MERCHANT_PREFIXES: Tuple[str, ...] = (
    "POS",
    "ACH",
    "DEBIT",
    "CREDIT",
    "PMT",
    "PYMT",
    "PMNT",
    "PUR",
    "PURCH",
    "PURCHASE",
)

# Elasticity is decided by the first matching keyword, so order matters:
# specific discretionary terms come before broad necessity terms.
ELASTICITY_TABLE: Tuple[Tuple[str, Elasticity], ...] = (
    ("RIDESHARE", Elasticity.ELASTIC),
    ("DINING", Elasticity.ELASTIC),
    ("RESTAURANT", Elasticity.ELASTIC),
    ("ENTERTAINMENT", Elasticity.ELASTIC),
    ("TRAVEL", Elasticity.ELASTIC),
    ("SHOPPING", Elasticity.ELASTIC),
    ("GAMBLING", Elasticity.ELASTIC),
    ("LUXURY", Elasticity.ELASTIC),
    ("RECREATION", Elasticity.ELASTIC),
    ("GIFT", Elasticity.ELASTIC),
    ("RENTAL", Elasticity.ELASTIC),
    ("HOUSING", Elasticity.INELASTIC),
    ("RENT", Elasticity.INELASTIC),
    ("MORTGAGE", Elasticity.INELASTIC),
    ("UTILIT", Elasticity.INELASTIC),
    ("GROCER", Elasticity.INELASTIC),
    ("TRANSIT", Elasticity.INELASTIC),
    ("HEALTH", Elasticity.INELASTIC),
    ("MEDICAL", Elasticity.INELASTIC),
    ("PHARMACY", Elasticity.INELASTIC),
    ("INSURANCE", Elasticity.INELASTIC),
    ("GAS", Elasticity.INELASTIC),
    ("FUEL", Elasticity.INELASTIC),
)

TRAVEL_KEYWORDS: Tuple[str, ...] = (
    "AIRLINE",
    "FLIGHT",
    "HOTEL",
    "MOTEL",
    "AIRBNB",
    "VRBO",
    "BOOKING",
    "EXPEDIA",
    "TRIP",
    "TRAVEL",
    "CAR RENTAL",
    "HERTZ",
    "AVIS",
    "UBER",
    "LYFT",
)

GAMBLING_KEYWORDS: Tuple[str, ...] = (
    "CASINO",
    "POKER",
    "BETTING",
    "GAMBLE",
    "DRAFTKINGS",
    "FANDUEL",
)

SUBSCRIPTION_BRANDS: Tuple[str, ...] = (
    "NETFLIX",
    "SPOTIFY",
    "APPLE",
    "AMAZON",
    "PRIME",
    "HBO",
    "DISNEY",
    "HULU",
    "YOUTUBE",
    "SUBSCRIPTION",
    "MONTHLY",
    "ANNUAL",
)

TECH_UTILITY_KEYWORDS: Tuple[str, ...] = (
    "APPLE",
    "GOOGLE",
    "AMAZON",
    "MICROSOFT",
    "ADOBE",
    "GITHUB",
    "AWS",
    "CLOUD",
    "HOSTING",
    "DOMAIN",
    "GODADDY",
)


@dataclass(frozen=True)
class RewardRule:
    """Category-triggered rewards rule template"""

    key: str
    category_keywords: Tuple[str, ...]
    condition: str
    actions: Tuple[str, ...]
    label: str


REWARD_RULES: Tuple[RewardRule, ...] = (
    RewardRule(
        key="coffee_rewards",
        category_keywords=("COFFEE", "CAFE"),
        condition="coffee_freq >= 5",
        actions=("activate_5pct_cafe_cashback", "boost_favorite_brands_8pct_90d"),
        label="Coffee rewards activation — daily engagement anchor.",
    ),
    RewardRule(
        key="transit_bundle",
        category_keywords=("TRANSIT", "TRANSPORTATION"),
        condition="transit_freq >= 5",
        actions=("activate_transit_rewards", "offer_commuter_benefits"),
        label="Transit & rideshare bundle — inelastic + convenience value.",
    ),
)

REWARD_RULE_MIN_COUNT = 3


def matches_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    """True if any keyword occurs in text (case-insensitive)"""
    if not text:
        return False
    upper = text.upper()
    return any(keyword in upper for keyword in keywords)


def classify_elasticity(category: Optional[str]) -> Elasticity:
    """Static elasticity lookup; unknown categories are Moderate"""
    upper = (category or "").upper()
    for keyword, label in ELASTICITY_TABLE:
        if keyword in upper:
            return label
    return Elasticity.MODERATE
