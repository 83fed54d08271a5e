"""Parameter comparison between a schematic device and its layout device."""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence

from .types import MISSING, ParameterDelta

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.05   # relative, 5%
COMPARED_PARAMETERS = ('w', 'l', 'nf', 'r', 'c', 'mult')

# Guards the relative difference against a zero schematic value
MIN_DENOMINATOR = 1e-18


def to_number(value: Any) -> Optional[float]:
    """Numeric reading of a parameter value, or None if it has none."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def relative_diff(schematic_value: float, layout_value: float) -> float:
    """|s - l| / max(|s|, 1e-18)."""
    return abs(schematic_value - layout_value) / max(abs(schematic_value), MIN_DENOMINATOR)


def percent(fraction: float) -> float:
    """Fraction as a percentage rounded to 2 decimals (0.047619 -> 4.76)."""
    return round(fraction * 10000) / 100


class ParameterComparator:
    """Flag parameters whose schematic and layout values disagree.

    Example:
        comparator = ParameterComparator(tolerance=0.05)
        deltas = comparator.compare({'w': 1.0}, {'w': 1.06})
        # [ParameterDelta(param='w', schematic_value=1.0, layout_value=1.06, percent_diff=6.0)]
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        parameters: Sequence[str] = COMPARED_PARAMETERS,
    ):
        """
        Args:
            tolerance: Relative difference allowed before a numeric
                parameter is flagged (0.05 = 5%)
            parameters: Parameter keys compared, in report order
        """
        if tolerance < 0:
            raise ValueError(f"Tolerance must be non-negative, got {tolerance}")
        self.tolerance = tolerance
        self.parameters = tuple(parameters)

    def compare(
        self,
        schematic_params: Mapping[str, Any],
        layout_params: Mapping[str, Any],
    ) -> List[ParameterDelta]:
        """Return the flagged parameters in comparison-key order."""
        deltas: List[ParameterDelta] = []
        for p in self.parameters:
            sv = schematic_params.get(p)
            lv = layout_params.get(p)

            if sv is None and lv is None:
                continue
            if sv is None or lv is None:
                deltas.append(ParameterDelta(
                    param=p,
                    schematic_value=MISSING if sv is None else sv,
                    layout_value=MISSING if lv is None else lv,
                ))
                continue

            s_num = to_number(sv)
            l_num = to_number(lv)
            if s_num is None or l_num is None:
                if str(sv) != str(lv):
                    deltas.append(ParameterDelta(param=p, schematic_value=sv, layout_value=lv))
                continue

            diff = relative_diff(s_num, l_num)
            if diff > self.tolerance:
                deltas.append(ParameterDelta(
                    param=p,
                    schematic_value=s_num,
                    layout_value=l_num,
                    percent_diff=percent(diff),
                ))

        if deltas:
            logger.debug(f"Flagged parameters: {', '.join(d.param for d in deltas)}")
        return deltas
