from fastmcp import FastMCP
from datetime import datetime
import pytz
from typing import Optional
import logging
import threading
import time

# Import our modules
from models import ErrorCode, Failure
from config import load_config
from client import RajaOngkir
from errors import ConfigurationError, TransportError

# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# INITIALIZE MCP SERVER

mcp = FastMCP("Rajaongkir Shipping Service")

_client: Optional[RajaOngkir] = None
# Guards the lazy client and serializes calls on it; the client's error log,
# last response and requests session are not safe for concurrent use
_client_lock = threading.RLock()


def get_client() -> RajaOngkir:
    """Return the shared client, building it from the environment on first use"""
    global _client
    with _client_lock:
        if _client is None:
            _client = RajaOngkir.from_config(load_config())
            logger.info(f"Rajaongkir client ready ({_client.account_type.value} account)")
        return _client


def _now() -> str:
    return datetime.now(pytz.UTC).isoformat()


def _run(request_id: str, operation: str, call) -> dict:
    """
    Run a client call and turn its outcome into a tool response

    Args:
        request_id: Identifier used in log lines
        operation: Name of the operation, for messages
        call: Zero-argument callable invoking the client

    Returns:
        Success payload with "data", or an error payload with "error_code"
    """
    try:
        with _client_lock:
            result = call()
    except ConfigurationError as e:
        logger.error(f"[{request_id}] Configuration error: {str(e)}")
        return {
            "error": "Service is not configured. Check RAJAONGKIR_* settings.",
            "error_code": ErrorCode.CONFIG_ERROR.value
        }
    except ValueError as e:
        logger.warning(f"[{request_id}] Invalid input for {operation}: {str(e)}")
        return {
            "error": str(e),
            "error_code": ErrorCode.INVALID_INPUT.value
        }
    except TransportError as e:
        logger.error(f"[{request_id}] Rajaongkir unreachable: {str(e)}")
        return {
            "error": "Shipping service temporarily unavailable. Please try again later.",
            "error_code": ErrorCode.SERVICE_UNAVAILABLE.value
        }
    except Exception:
        logger.exception(f"[{request_id}] Unexpected error in {operation}")
        return {
            "error": "An unexpected error occurred",
            "error_code": ErrorCode.INTERNAL_ERROR.value
        }

    if isinstance(result, Failure):
        logger.warning(f"[{request_id}] {operation} failed: {result.code} {result.description}")
        return {
            "error": result.description,
            "error_code": ErrorCode.REJECTED.value,
            "rajaongkir_code": result.code
        }

    if result is None:
        return {
            "error": f"No {operation} data found",
            "error_code": ErrorCode.NOT_FOUND.value
        }

    logger.info(f"[{request_id}] {operation} completed")
    return {"status": "success", "data": result}


def _request_id() -> str:
    return f"{int(time.time() * 1000)}"

# MCP TOOLS

@mcp.tool()
def provinces(province_id: Optional[int] = None) -> dict:
    """
    List Indonesian provinces, or a single province when province_id is given.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] Province request: province_id={province_id}")

    if province_id is None:
        return _run(request_id, "province", lambda: get_client().get_provinces())
    return _run(request_id, "province", lambda: get_client().get_province(province_id))


@mcp.tool()
def cities(province_id: Optional[int] = None, city_id: Optional[int] = None) -> dict:
    """
    List cities, optionally filtered by province, or a single city when city_id is given.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] City request: province_id={province_id}, city_id={city_id}")

    if city_id is not None:
        return _run(request_id, "city", lambda: get_client().get_city(city_id))
    return _run(request_id, "city", lambda: get_client().get_cities(province_id))


@mcp.tool()
def subdistricts(city_id: int, subdistrict_id: Optional[int] = None) -> dict:
    """
    List subdistricts (kecamatan) of a city. Requires a pro account.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] Subdistrict request: city_id={city_id}, subdistrict_id={subdistrict_id}")

    return _run(
        request_id, "subdistrict",
        lambda: get_client().get_subdistricts(city_id, subdistrict_id)
    )


@mcp.tool()
def international_origins(city_id: Optional[int] = None, province_id: Optional[int] = None) -> dict:
    """
    List cities that can ship internationally. Requires a basic or pro account.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] International origin request: city_id={city_id}, province_id={province_id}")

    return _run(
        request_id, "international origin",
        lambda: get_client().get_international_origins(city_id, province_id)
    )


@mcp.tool()
def international_destinations(country_id: Optional[int] = None) -> dict:
    """
    List destination countries, or a single country when country_id is given.
    Use the country id as destination_id with destination_type "country" in shipping_cost.
    Requires a basic or pro account.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] International destination request: country_id={country_id}")

    return _run(
        request_id, "international destination",
        lambda: get_client().get_international_destinations(country_id)
    )


@mcp.tool()
def shipping_cost(
    origin_id: int,
    destination_id: int,
    courier: str,
    weight: Optional[float] = None,
    origin_type: str = "city",
    destination_type: str = "city",
    length: Optional[float] = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
    diameter: Optional[float] = None,
) -> dict:
    """
    Calculate shipping cost.

    origin_type is "city" or "subdistrict"; destination_type is "city",
    "subdistrict" or "country". Weight is in grams, dimensions in centimeters.
    When all three dimensions are given the volumetric weight is used if it
    is heavier than the actual weight.
    """
    request_id = _request_id()
    logger.info(
        f"[{request_id}] Cost request: {origin_type}:{origin_id} -> "
        f"{destination_type}:{destination_id}, courier={courier}, weight={weight}"
    )

    metrics = {
        "weight": weight,
        "length": length,
        "width": width,
        "height": height,
        "diameter": diameter,
    }
    return _run(
        request_id, "cost",
        lambda: get_client().get_cost(
            {origin_type: origin_id}, {destination_type: destination_id}, metrics, courier
        )
    )


@mcp.tool()
def track_waybill(waybill: str, courier: str) -> dict:
    """
    Track a shipment by waybill (resi) number.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] Waybill request: courier={courier}")

    return _run(request_id, "waybill", lambda: get_client().get_waybill(waybill, courier))


@mcp.tool()
def currency() -> dict:
    """
    Get the current IDR/USD exchange rate used for international costs.
    """
    request_id = _request_id()
    logger.info(f"[{request_id}] Currency request")

    return _run(request_id, "currency", lambda: get_client().get_currency())


@mcp.tool()
def list_couriers() -> dict:
    """
    List couriers known to the service and those available on the configured account.
    """
    try:
        client = get_client()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return {
            "error": "Service is not configured. Check RAJAONGKIR_* settings.",
            "error_code": ErrorCode.CONFIG_ERROR.value
        }

    return {
        "status": "success",
        "account_type": client.account_type.value,
        "couriers": client.get_couriers_list(),
        "cost_couriers": client.get_supported_couriers(),
        "waybill_couriers": client.get_supported_waybills()
    }


@mcp.tool()
def health_check() -> dict:
    """
    Health check endpoint for monitoring
    """
    try:
        client = get_client()
        return {
            "status": "healthy",
            "timestamp": _now(),
            "account_type": client.account_type.value,
            "recorded_errors": client.get_errors()
        }
    except ConfigurationError as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "timestamp": _now(),
            "error": str(e)
        }


# ============================================
# RUN SERVER
# ============================================

if __name__ == "__main__":
    logger.info("Starting Rajaongkir Shipping Service")

    try:
        client = get_client()
        logger.info(f"Account type: {client.account_type.value}")

        mcp.run(transport="http")

    except Exception as e:
        logger.critical(f"Failed to start server: {str(e)}")
        raise
