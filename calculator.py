"""
calculator.py - Package Weight Calculations
"""

import logging
import math
from numbers import Number, Real
from typing import Dict, Mapping, Optional, Union

from tiers import DIMENSION_FIELDS, METRIC_FIELDS

logger = logging.getLogger(__name__)


class MetricsCalculator:
    """Handles weight and dimension normalization for cost requests"""

    # Divisor used by Indonesian couriers for volumetric weight (cm^3 per kg)
    VOLUMETRIC_DIVISOR = 6000

    @staticmethod
    def _to_number(name: str, value) -> Union[int, float]:
        if isinstance(value, bool):
            raise ValueError(f"Metric '{name}' must be a number, got {value!r}")
        if isinstance(value, Real):
            number = value
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise ValueError(f"Metric '{name}' must be a number, got {value!r}") from None
            if math.isfinite(number) and number.is_integer():
                number = int(number)
        else:
            raise ValueError(f"Metric '{name}' must be a number, got {type(value).__name__}")

        if not math.isfinite(number) or number < 0:
            raise ValueError(f"Metric '{name}' must be a finite, non-negative number, got {value!r}")
        return number

    @staticmethod
    def normalize_metrics(metrics: Union[Number, str, Mapping]) -> Dict[str, Union[int, float]]:
        """
        Turn a bare weight or a metrics mapping into a dict of metric fields

        Args:
            metrics: Weight in grams, or a mapping with optional
                weight/length/width/height/diameter

        Returns:
            Dictionary holding only the metric fields that were given

        Raises:
            ValueError: If metrics is neither a number nor a mapping
        """
        if isinstance(metrics, Mapping):
            normalized = {}
            for name, value in metrics.items():
                if name not in METRIC_FIELDS:
                    logger.debug(f"Ignoring unknown metric field '{name}'")
                    continue
                if value is None:
                    continue
                normalized[name] = MetricsCalculator._to_number(name, value)
            return normalized

        return {"weight": MetricsCalculator._to_number("weight", metrics)}

    @staticmethod
    def volumetric_weight(length: float, width: float, height: float) -> float:
        """
        Volumetric weight in grams for dimensions in centimeters

        Args:
            length: Package length (cm)
            width: Package width (cm)
            height: Package height (cm)

        Returns:
            (length * width * height) / 6000 * 1000
        """
        weight = (length * width * height) / MetricsCalculator.VOLUMETRIC_DIVISOR * 1000
        logger.debug(f"Volumetric weight for {length}x{width}x{height}: {weight:.2f} g")
        return weight

    @staticmethod
    def has_dimensions(metrics: Mapping) -> bool:
        return any(name in metrics for name in DIMENSION_FIELDS)

    @staticmethod
    def resolve_weight(metrics: Mapping) -> Dict[str, Union[int, float]]:
        """
        Work out the billable weight

        The volumetric weight is only computed when length, width and height
        are all present. It replaces a missing weight and overrides an
        explicit weight that is lighter.

        Args:
            metrics: Normalized metrics

        Returns:
            Copy of metrics with the resolved weight
        """
        resolved = dict(metrics)
        if not all(name in resolved for name in ("length", "width", "height")):
            return resolved

        volumetric = MetricsCalculator.volumetric_weight(
            resolved["length"], resolved["width"], resolved["height"]
        )
        weight: Optional[float] = resolved.get("weight")

        if weight is None:
            resolved["weight"] = volumetric
            logger.debug(f"No weight given, using volumetric weight {volumetric:.2f} g")
        elif volumetric > weight:
            resolved["weight"] = volumetric
            logger.debug(f"Volumetric weight {volumetric:.2f} g exceeds actual weight {weight} g")

        return resolved
