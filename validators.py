"""
validators.py - Input Validation and Tier Gating
"""

import logging
from typing import Any, Mapping, Optional, Tuple

from calculator import MetricsCalculator
from models import AccountTier, CostRequest, Failure, LocationType
from tiers import REJECTIONS, UNSUPPORTED_CODE, TierPolicy

logger = logging.getLogger(__name__)


class InputValidator:
    """Validates and normalizes client inputs"""

    @staticmethod
    def validate_account_type(account_type) -> Tuple[bool, Optional[AccountTier], Optional[str]]:
        """
        Validate and normalize an account type

        Args:
            account_type: AccountTier member or tier name in any case

        Returns:
            Tuple of (is_valid, normalized_value, error_message)
        """
        if isinstance(account_type, AccountTier):
            return True, account_type, None

        if not isinstance(account_type, str):
            return False, None, "Account type must be a string"

        normalized = account_type.lower()
        try:
            tier = AccountTier(normalized)
        except ValueError:
            allowed = ", ".join(t.value for t in AccountTier)
            return False, None, f"Invalid account type '{account_type}'. Allowed: {allowed}"

        logger.debug(f"Account type validated: '{account_type}' -> '{tier.value}'")
        return True, tier, None

    @staticmethod
    def validate_api_key(api_key) -> Tuple[bool, Optional[str], Optional[str]]:
        if not api_key:
            return False, None, "API key is required"
        if not isinstance(api_key, str):
            return False, None, "API key must be a string"
        return True, api_key, None

    @staticmethod
    def normalize_courier(courier) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Normalize a courier code (or colon-separated list of codes)

        Returns:
            Tuple of (is_valid, normalized_value, error_message)
        """
        if not courier:
            return False, None, "Courier is required"
        if not isinstance(courier, str):
            return False, None, "Courier must be a string"

        codes = [code.strip() for code in courier.lower().split(":") if code.strip()]
        if not codes:
            return False, None, "Courier cannot be empty"

        return True, ":".join(codes), None

    @staticmethod
    def parse_location(
        location: Mapping[str, Any], allow_country: bool = False
    ) -> Tuple[bool, Optional[Tuple[LocationType, Any]], Optional[str]]:
        """
        Split a single-entry location mapping into its type and identifier

        The key names the location kind. "city" (and "country" when allowed)
        are kept, anything else is treated as a subdistrict.

        Args:
            location: Mapping such as {"city": 501}
            allow_country: Whether "country" is a valid kind (destinations only)

        Returns:
            Tuple of (is_valid, (location_type, identifier), error_message)
        """
        if not isinstance(location, Mapping) or len(location) != 1:
            return False, None, "Location must be a mapping with exactly one entry, e.g. {'city': 501}"

        (kind, identifier), = location.items()
        kind = str(kind).lower()

        if kind == LocationType.CITY.value:
            location_type = LocationType.CITY
        elif allow_country and kind == LocationType.COUNTRY.value:
            location_type = LocationType.COUNTRY
        else:
            location_type = LocationType.SUBDISTRICT

        if identifier is None or identifier == "":
            return False, None, f"Location identifier for '{kind}' is required"

        return True, (location_type, identifier), None


def rejection(reason: str, policy: TierPolicy) -> Failure:
    """Build the fixed failure for a tier-gating rejection"""
    return Failure(UNSUPPORTED_CODE, REJECTIONS[reason].format(tier=policy.label))


class CostRuleValidator:
    """Applies the account-tier rules to a cost request"""

    @staticmethod
    def check(request: CostRequest, policy: TierPolicy) -> Optional[Failure]:
        """
        Check a cost request against the tier policy

        Args:
            request: Cost request with resolved weight
            policy: Active tier policy

        Returns:
            Failure describing the first violated rule, or None when allowed
        """
        if request.is_international and not policy.international:
            return rejection("international_destination", policy)

        if request.touches_subdistrict() and not policy.subdistrict:
            return rejection("subdistrict_route", policy)

        weight = request.weight
        if (
            policy.dimensions_need_weight
            and weight is None
            and MetricsCalculator.has_dimensions(request.metrics)
        ):
            return rejection("dimension_without_weight", policy)

        if policy.max_weight is not None and weight is not None and weight > policy.max_weight:
            return rejection("weight_limit", policy)

        if policy.check_couriers:
            unsupported = [
                code for code in request.courier.split(":") if code not in policy.couriers
            ]
            if unsupported:
                logger.debug(f"Couriers not available on {policy.label}: {unsupported}")
                return rejection("courier", policy)

        return None
