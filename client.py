"""
client.py - Rajaongkir API Client

Wraps the Rajaongkir shipping-rate API. Every query goes through
RajaOngkir._request, which picks the host from the account tier, attaches the
API key header and unwraps the "rajaongkir" envelope.

Failed calls return a falsy Failure and record its code and description in
RajaOngkir.errors. Network and decoding problems raise TransportError instead.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from calculator import MetricsCalculator
from config import DEFAULT_TIMEOUT
from errors import ConfigurationError, TransportError
from models import AccountTier, CostRequest, Failure
from tiers import COURIERS, DIMENSION_FIELDS, TierPolicy, get_policy
from validators import CostRuleValidator, InputValidator, rejection

logger = logging.getLogger(__name__)


class RajaOngkir:
    """Client for the Rajaongkir API, bound to one API key and account tier"""

    def __init__(
        self,
        api_key,
        account_type=AccountTier.STARTER.value,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_key: API key, or a mapping with "api_key" and optionally
                "account_type" and "timeout"
            account_type: starter, basic or pro (any case)
            timeout: Seconds to wait for each request
            session: requests session to send requests with

        Raises:
            ConfigurationError: If the API key is empty or the account type unknown
        """
        if isinstance(api_key, Mapping):
            account_type = api_key.get("account_type", account_type)
            timeout = api_key.get("timeout", timeout)
            api_key = api_key.get("api_key")

        self.api_key: Optional[str] = None
        self.account_type = AccountTier.STARTER
        self.timeout = timeout
        self.session = session or requests.Session()
        self.last_response: Optional[requests.Response] = None
        self.errors: Dict[int, str] = {}

        self.set_api_key(api_key)
        self.set_account_type(account_type)

    @classmethod
    def from_config(cls, config: Mapping, session: Optional[requests.Session] = None) -> "RajaOngkir":
        """Build a client from config.load_config() output"""
        return cls(
            config["api_key"],
            account_type=config.get("account_type", AccountTier.STARTER.value),
            timeout=config.get("timeout", DEFAULT_TIMEOUT),
            session=session,
        )

    # Configuration

    def set_api_key(self, api_key: str) -> "RajaOngkir":
        is_valid, normalized, error = InputValidator.validate_api_key(api_key)
        if not is_valid:
            raise ConfigurationError(f"Rajaongkir: {error}")
        self.api_key = normalized
        return self

    def set_account_type(self, account_type) -> "RajaOngkir":
        """
        Switch the account tier used by subsequent requests

        Raises:
            ConfigurationError: If the account type is not recognized; the
                current tier is left unchanged
        """
        is_valid, tier, error = InputValidator.validate_account_type(account_type)
        if not is_valid:
            raise ConfigurationError(f"Rajaongkir: Invalid Account Type. {error}")
        self.account_type = tier
        logger.debug(f"Account type set to '{tier.value}'")
        return self

    @property
    def policy(self) -> TierPolicy:
        return get_policy(self.account_type)

    def get_errors(self) -> Dict[int, str]:
        return dict(self.errors)

    # Dispatch

    def _record(self, failure: Failure) -> Failure:
        self.errors[failure.code] = failure.description
        return failure

    def _reject(self, reason: str) -> Failure:
        failure = rejection(reason, self.policy)
        logger.warning(f"Rejected {reason} request on {self.account_type.value} account")
        return self._record(failure)

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None, method: str = "GET"):
        """
        Send a request and unwrap the response envelope

        Args:
            path: Endpoint path relative to the tier prefix
            params: Query parameters (GET) or form fields (POST)
            method: GET or POST

        Returns:
            The results (a single result unwrapped from its list), the result
            object, None when the response carries neither, or a Failure when
            the API reports a non-200 status

        Raises:
            TransportError: On network failure or an undecodable body
        """
        url = self.policy.url_for(path)
        params = params or {}
        headers = {"key": self.api_key}
        payload = {"params": params} if method.upper() == "GET" else {"data": params}

        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **payload
            )
        except requests.Timeout as e:
            logger.error(f"Request to {url} timed out after {self.timeout}s")
            raise TransportError(f"Request to '{path}' timed out", url=url) from e
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {str(e)}")
            raise TransportError(f"Request to '{path}' failed: {e}", url=url) from e

        self.last_response = response

        try:
            body = response.json()["rajaongkir"]
            status = body["status"]
            code = int(status["code"])
            description = status.get("description", "")
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed response from {url} (HTTP {response.status_code})")
            raise TransportError(
                f"Malformed response from '{path}'", url=url, status_code=response.status_code
            ) from e

        if code != 200:
            logger.warning(f"Rajaongkir returned {code} for {path}: {description}")
            return self._record(Failure(code, description))

        results = body.get("results")
        if results is not None:
            if isinstance(results, list) and len(results) == 1:
                return results[0]
            return results

        return body.get("result")

    # Reference data

    def get_couriers_list(self) -> Dict[str, str]:
        return dict(COURIERS)

    def get_supported_couriers(self) -> List[str]:
        return sorted(self.policy.couriers)

    def get_supported_waybills(self) -> List[str]:
        return sorted(self.policy.waybill_couriers)

    def get_provinces(self):
        return self._request("province")

    def get_province(self, province_id):
        return self._request("province", {"id": province_id})

    def get_cities(self, province_id=None):
        params = {"province": province_id} if province_id is not None else {}
        return self._request("city", params)

    def get_city(self, city_id):
        return self._request("city", {"id": city_id})

    def get_subdistricts(self, city_id, subdistrict_id=None):
        if not self.policy.subdistrict:
            return self._reject("subdistrict_lookup")

        params = {"city": city_id}
        if subdistrict_id is not None:
            params["id"] = subdistrict_id
        return self._request("subdistrict", params)

    def get_subdistrict(self, subdistrict_id):
        if not self.policy.subdistrict:
            return self._reject("subdistrict_lookup")
        return self._request("subdistrict", {"id": subdistrict_id})

    def get_international_origins(self, city_id=None, province_id=None):
        if not self.policy.international:
            return self._reject("international_lookup")

        params = {}
        if city_id is not None:
            params["id"] = city_id
        if province_id is not None:
            params["province"] = province_id
        return self._request("internationalOrigin", params)

    def get_international_origin(self, city_id, province_id=None):
        return self.get_international_origins(city_id, province_id)

    def get_international_destinations(self, country_id=None):
        if not self.policy.international:
            return self._reject("international_lookup")

        params = {"id": country_id} if country_id is not None else {}
        return self._request("internationalDestination", params)

    def get_international_destination(self, country_id):
        return self.get_international_destinations(country_id)

    # Cost, waybill and currency

    def get_cost(self, origin: Mapping, destination: Mapping, metrics, courier: str):
        """
        Get shipping costs between two locations

        Args:
            origin: {"city": id} or {"subdistrict": id}; any key other than
                "city" is treated as a subdistrict
            destination: {"city": id}, {"country": id} or {"subdistrict": id}
            metrics: Weight in grams, or a mapping with optional
                weight/length/width/height/diameter
            courier: Courier code, or several joined by ":"

        Returns:
            Cost results, None when nothing was found, or a Failure when the
            tier does not allow the request or the API rejects it

        Raises:
            ValueError: If origin, destination, metrics or courier are malformed
            TransportError: On network failure or an undecodable body
        """
        origin_valid, origin_location, origin_error = InputValidator.parse_location(origin)
        if not origin_valid:
            raise ValueError(f"Invalid origin: {origin_error}")

        destination_valid, destination_location, destination_error = InputValidator.parse_location(
            destination, allow_country=True
        )
        if not destination_valid:
            raise ValueError(f"Invalid destination: {destination_error}")

        courier_valid, courier_code, courier_error = InputValidator.normalize_courier(courier)
        if not courier_valid:
            raise ValueError(courier_error)

        origin_type, origin_id = origin_location
        destination_type, destination_id = destination_location

        request = CostRequest(
            origin=origin_id,
            origin_type=origin_type,
            destination=destination_id,
            destination_type=destination_type,
            courier=courier_code,
            metrics=MetricsCalculator.resolve_weight(MetricsCalculator.normalize_metrics(metrics)),
        )

        failure = CostRuleValidator.check(request, self.policy)
        if failure is not None:
            logger.warning(
                f"Cost request rejected on {self.account_type.value} account: {failure.description}"
            )
            return self._record(failure)

        if self.policy.drops_dimensions(request.weight):
            request.drop_dimensions(DIMENSION_FIELDS)

        path = "internationalCost" if request.is_international else "cost"
        return self._request(path, request.to_params(), "POST")

    def get_waybill(self, waybill: str, courier: str):
        """
        Track a shipment

        Returns:
            Waybill details, None when not found, or a Failure when the
            courier cannot be tracked on this tier
        """
        courier_valid, courier_code, courier_error = InputValidator.normalize_courier(courier)
        if not courier_valid:
            raise ValueError(courier_error)

        if courier_code not in self.policy.waybill_couriers:
            return self._reject("waybill")

        return self._request("waybill", {"waybill": waybill, "courier": courier_code}, "POST")

    def get_currency(self):
        if not self.policy.currency:
            return self._reject("currency")
        return self._request("currency")
