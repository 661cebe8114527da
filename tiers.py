"""
tiers.py - Courier catalog and per-account-tier policies

Every tier-dependent rule of the client (host, allowed couriers, weight cap,
subdistrict/international/currency access) is read from TIER_POLICIES, so the
client itself never branches on the tier name.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from models import AccountTier

PUBLIC_HOST = "https://api.rajaongkir.com"
PRO_HOST = "https://pro.rajaongkir.com"

# Code recorded in the error log for every tier-gating rejection
UNSUPPORTED_CODE = 301

# Weight cap (grams) for tiers that enforce one
MAX_WEIGHT_GRAMS = 30000

DIMENSION_FIELDS = ("length", "width", "height", "diameter")
METRIC_FIELDS = ("weight",) + DIMENSION_FIELDS

COURIERS: Dict[str, str] = {
    "cahaya": "Cahaya Logistik (CAHAYA)",
    "dse": "21 Express (DSE)",
    "esl": "Eka Sari Lorena (ESL)",
    "expedito*": "Expedito*",
    "first": "First Logistics (FIRST)",
    "idl": "IDL Cargo (IDL)",
    "indah": "Indah Logistic (INDAH)",
    "j&t": "J&T Express (J&T)",
    "jet": "JET Express (JET)",
    "jne": "Jalur Nugraha Ekakurir (JNE)",
    "lion": "Lion Parcel (LION)",
    "ncs": "Nusantara Card Semesta (NCS)",
    "ninja-express": "Ninja Xpress (NINJA)",
    "pahala": "Pahala Kencana Express (PAHALA)",
    "pandu": "Pandu Logistics (PANDU)",
    "pcp": "Priority Cargo and Package (PCP)",
    "pos": "POS Indonesia (POS)",
    "rex": "Royal Express Indonesia (REX)",
    "rpx": "RPX Holding (RPX)",
    "sap": "SAP Express (SAP)",
    "sicepat": "SiCepat Express (SICEPAT)",
    "slis": "Solusi Express (SLIS)",
    "star": "Star Cargo (STAR)",
    "tiki": "Citra Van Titipan Kilat (TIKI)",
    "wahana": "Wahana Prestasi Logistik (WAHANA)",
}


@dataclass(frozen=True)
class TierPolicy:
    """
    Rules applied to a single account tier

    Attributes:
        tier: Tier this policy belongs to
        base_url: Host the tier's requests go to
        path_prefix: Prefix placed before every endpoint path
        couriers: Courier codes usable for cost calculation
        waybill_couriers: Courier codes usable for waybill tracking
        check_couriers: Reject cost requests for couriers outside `couriers`
        dimensions_need_weight: Reject dimensions that leave no resulting weight
        max_weight: Weight cap in grams, None when uncapped
        strip_dimensions: Drop dimension fields when the weight is under the cap
        subdistrict: Subdistrict lookups and routing allowed
        international: International lookups and destinations allowed
        currency: Currency endpoint allowed
    """
    tier: AccountTier
    base_url: str
    path_prefix: str
    couriers: FrozenSet[str]
    waybill_couriers: FrozenSet[str]
    check_couriers: bool
    dimensions_need_weight: bool
    max_weight: Optional[int]
    strip_dimensions: bool
    subdistrict: bool
    international: bool
    currency: bool

    @property
    def label(self) -> str:
        return self.tier.value.capitalize()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{self.path_prefix}/{path}"

    def drops_dimensions(self, weight) -> bool:
        """Dimensions are not sent once a weight under the cap is known"""
        return (
            self.strip_dimensions
            and self.max_weight is not None
            and weight is not None
            and weight < self.max_weight
        )


TIER_POLICIES: Dict[AccountTier, TierPolicy] = {
    AccountTier.STARTER: TierPolicy(
        tier=AccountTier.STARTER,
        base_url=PUBLIC_HOST,
        path_prefix="starter",
        couriers=frozenset({"jne", "pos", "tiki"}),
        waybill_couriers=frozenset(),
        check_couriers=True,
        dimensions_need_weight=True,
        max_weight=MAX_WEIGHT_GRAMS,
        strip_dimensions=False,
        subdistrict=False,
        international=False,
        currency=False,
    ),
    AccountTier.BASIC: TierPolicy(
        tier=AccountTier.BASIC,
        base_url=PUBLIC_HOST,
        path_prefix="basic",
        couriers=frozenset({"esl", "jne", "pcp", "pos", "rpx", "tiki"}),
        waybill_couriers=frozenset({"jne"}),
        check_couriers=True,
        dimensions_need_weight=True,
        max_weight=MAX_WEIGHT_GRAMS,
        strip_dimensions=True,
        subdistrict=False,
        international=True,
        currency=True,
    ),
    AccountTier.PRO: TierPolicy(
        tier=AccountTier.PRO,
        base_url=PRO_HOST,
        path_prefix="api",
        couriers=frozenset({
            "cahaya", "dse", "esl", "expedito*", "first", "idl", "indah", "j&t", "jet", "jne",
            "lion", "ncs", "ninja-express", "pahala", "pandu", "pcp", "pos", "rex", "rpx", "sap",
            "sicepat", "slis", "star", "tiki", "wahana",
        }),
        waybill_couriers=frozenset({
            "dse", "first", "j&t", "jet", "jne", "pcp", "pos", "rpx", "sap", "sicepat", "tiki", "wahana",
        }),
        check_couriers=False,
        dimensions_need_weight=False,
        max_weight=None,
        strip_dimensions=False,
        subdistrict=True,
        international=True,
        currency=True,
    ),
}

# Rejection descriptions, formatted with the tier label
REJECTIONS: Dict[str, str] = {
    "international_destination": (
        "Unsupported International Destination. "
        "{tier} account does not support international destinations."
    ),
    "subdistrict_route": (
        "Unsupported Subdistrict Origin-Destination. "
        "{tier} account does not support subdistrict level cost calculation."
    ),
    "dimension_without_weight": (
        "Unsupported Dimension. "
        "{tier} account does not support cost calculation by dimension only."
    ),
    "weight_limit": (
        "Unsupported Weight. "
        "{tier} account does not support weight above 30000 grams (30kg)."
    ),
    "courier": (
        "Unsupported Courier. "
        "{tier} account does not support the requested courier."
    ),
    "subdistrict_lookup": (
        "Unsupported Subdistricts Request. "
        "{tier} account does not support subdistrict lookups."
    ),
    "international_lookup": (
        "Unsupported International Request. "
        "{tier} account does not support international origins and destinations."
    ),
    "waybill": (
        "Unsupported Way Bill Request. "
        "{tier} account does not support waybill tracking for the requested courier."
    ),
    "currency": (
        "Unsupported Get Currency. "
        "{tier} account does not support currency lookups."
    ),
}


def get_policy(tier: AccountTier) -> TierPolicy:
    return TIER_POLICIES[tier]


def courier_name(code: str) -> str:
    """Human-readable courier name, falling back to the upper-cased code"""
    return COURIERS.get(code, code.upper())
