"""Refine name-based sync mappings with LVS device matches.

LVS pairs devices by connectivity, so its verdict replaces the name-based
one: the refined mapping takes the LVS geometry indices, is synced for a
match and param-mismatch for a mismatch, and carries the LVS parameter diffs
that fell outside tolerance.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Optional

from .comparator import percent, relative_diff
from .types import LvsDeviceMatch, LvsMatchStatus, LvsParameterDiff, MISSING, ParameterDelta, SyncMapping

logger = logging.getLogger(__name__)

REFINED_STATUSES = (LvsMatchStatus.MATCH, LvsMatchStatus.MISMATCH)


def _delta(diff: LvsParameterDiff) -> ParameterDelta:
    s, l = diff.schematic_value, diff.layout_value
    pct: Optional[float] = None
    if s is not None and l is not None:
        pct = percent(relative_diff(s, l))
    return ParameterDelta(
        param=diff.parameter,
        schematic_value=MISSING if s is None else s,
        layout_value=MISSING if l is None else l,
        percent_diff=pct,
    )


def refine_mappings_from_lvs(
    mappings: Iterable[SyncMapping],
    device_matches: Iterable[LvsDeviceMatch],
) -> List[SyncMapping]:
    """Return a new mapping list with LVS verdicts applied.

    Matches with status extra/missing, or without both device names, are
    ignored. For each remaining match the first mapping whose instance name
    equals either device name (case-insensitive) is replaced.
    """
    refined = list(mappings)
    updated = 0
    for dm in device_matches:
        if dm.status not in REFINED_STATUSES:
            continue
        if not dm.schematic_device_name or not dm.layout_device_name:
            continue
        names = {dm.schematic_device_name.upper(), dm.layout_device_name.upper()}

        idx = next((i for i, m in enumerate(refined) if m.instance_name.upper() in names), None)
        if idx is None:
            logger.debug(f"No mapping for LVS pair {dm.schematic_device_name}/{dm.layout_device_name}")
            continue

        refined[idx] = dataclasses.replace(
            refined[idx],
            layout_geometry_indices=tuple(dm.geometry_indices),
            parameter_deltas=tuple(_delta(p) for p in dm.parameter_diffs if not p.within_tolerance),
            has_schematic=True,
            has_layout=True,
            lvs_match=dm.status is LvsMatchStatus.MATCH,
        )
        updated += 1

    logger.info(f"Refined {updated} sync mappings from LVS")
    return refined
