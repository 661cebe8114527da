"""
models.py - Data Models and Enums
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class AccountTier(Enum):
    """Rajaongkir subscription levels"""
    STARTER = "starter"
    BASIC = "basic"
    PRO = "pro"


class LocationType(Enum):
    """Kinds of origin/destination accepted by the cost endpoints"""
    CITY = "city"
    SUBDISTRICT = "subdistrict"
    COUNTRY = "country"


class ErrorCode(Enum):
    """Error codes for tool responses"""
    INVALID_INPUT = "INVALID_INPUT"
    REJECTED = "REJECTED"
    NOT_FOUND = "NOT_FOUND"
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


@dataclass(frozen=True)
class Failure:
    """
    Failed call result

    Falsy, so callers can keep treating it as the failure sentinel while
    still reading the code and description recorded in the error log.
    """
    code: int
    description: str

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {"code": self.code, "description": self.description}


@dataclass
class CostRequest:
    """Parameters assembled for a single cost calculation"""
    origin: Any
    origin_type: LocationType
    destination: Any
    destination_type: LocationType
    courier: str
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def weight(self):
        return self.metrics.get("weight")

    @property
    def is_international(self) -> bool:
        return self.destination_type is LocationType.COUNTRY

    def touches_subdistrict(self) -> bool:
        return LocationType.SUBDISTRICT in (self.origin_type, self.destination_type)

    def drop_dimensions(self, fields) -> None:
        for name in fields:
            self.metrics.pop(name, None)

    def to_params(self) -> dict:
        """Convert to the form parameters sent to the cost endpoint"""
        params = {
            "origin": self.origin,
            "originType": self.origin_type.value,
            "destination": self.destination,
            "destinationType": self.destination_type.value,
            "courier": self.courier,
        }
        params.update(self.metrics)
        return params
