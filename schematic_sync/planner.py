"""Remediation actions and summary counts for a set of sync mappings.

Priorities (lower = more urgent):
    1  create-layout-device       schematic-only device
    2  create-schematic-symbol    layout-only device
    3  update-layout-params       push schematic values to layout
    4  update-schematic-params    back-annotate layout values
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from .types import ParamValue, SyncAction, SyncActionType, SyncMapping, SyncStatus, SyncSummary

logger = logging.getLogger(__name__)

PRIORITY = {
    SyncActionType.CREATE_LAYOUT_DEVICE: 1,
    SyncActionType.CREATE_SCHEMATIC_SYMBOL: 2,
    SyncActionType.UPDATE_LAYOUT_PARAMS: 3,
    SyncActionType.UPDATE_SCHEMATIC_PARAMS: 4,
}


def count_net_mismatches(mappings: Iterable[SyncMapping]) -> int:
    """Pins with no layout net on paired (synced / param-mismatch) devices."""
    count = 0
    for m in mappings:
        if m.status in (SyncStatus.SYNCED, SyncStatus.PARAM_MISMATCH):
            count += sum(1 for net in m.net_mappings.values() if not net)
    return count


class ActionPlanner:
    """Turn sync mappings into a priority-sorted action list.

    Example:
        planner = ActionPlanner()
        actions = planner.plan(mappings)
        summary = planner.summarize(mappings, n_schematic, n_layout)
    """

    def plan(self, mappings: Iterable[SyncMapping]) -> List[SyncAction]:
        """Actions for every mapping, stably sorted by priority."""
        actions: List[SyncAction] = []
        for m in mappings:
            status = m.status
            if status is SyncStatus.MISSING_LAYOUT:
                actions.append(self._action(
                    SyncActionType.CREATE_LAYOUT_DEVICE,
                    f"Create layout for {m.instance_name} (exists in schematic only)",
                    m,
                ))
            elif status is SyncStatus.MISSING_SCHEMATIC:
                actions.append(self._action(
                    SyncActionType.CREATE_SCHEMATIC_SYMBOL,
                    f"Add {m.instance_name} to schematic (exists in layout only)",
                    m,
                ))
            elif status is SyncStatus.PARAM_MISMATCH:
                actions.extend(self._parameter_actions(m))

        actions.sort(key=lambda a: a.priority)
        logger.debug(f"Planned {len(actions)} sync actions")
        return actions

    def _parameter_actions(self, m: SyncMapping) -> List[SyncAction]:
        schematic_params: Dict[str, ParamValue] = {}
        layout_params: Dict[str, ParamValue] = {}
        for d in m.parameter_deltas:
            schematic_params[d.param] = d.schematic_value
            layout_params[d.param] = d.layout_value
        names = ", ".join(d.param for d in m.parameter_deltas)
        return [
            self._action(
                SyncActionType.UPDATE_LAYOUT_PARAMS,
                f"Push schematic params to layout for {m.instance_name}: {names}",
                m,
                schematic_params,
            ),
            self._action(
                SyncActionType.UPDATE_SCHEMATIC_PARAMS,
                f"Back-annotate layout params to schematic for {m.instance_name}: {names}",
                m,
                layout_params,
            ),
        ]

    @staticmethod
    def _action(action_type: SyncActionType, description: str, m: SyncMapping, suggested=None) -> SyncAction:
        return SyncAction(
            action_type=action_type,
            description=description,
            instance_name=m.instance_name,
            priority=PRIORITY[action_type],
            mapping=m,
            suggested_params=suggested,
        )

    @staticmethod
    def summarize(
        mappings: Sequence[SyncMapping],
        total_schematic_devices: int,
        total_layout_devices: int,
    ) -> SyncSummary:
        """Status buckets (which partition the mappings) plus net mismatches."""
        counts = {status: 0 for status in SyncStatus}
        for m in mappings:
            counts[m.status] += 1
        return SyncSummary(
            total_schematic_devices=total_schematic_devices,
            total_layout_devices=total_layout_devices,
            synced=counts[SyncStatus.SYNCED],
            param_mismatches=counts[SyncStatus.PARAM_MISMATCH],
            missing_in_layout=counts[SyncStatus.MISSING_LAYOUT],
            missing_in_schematic=counts[SyncStatus.MISSING_SCHEMATIC],
            unlinked=counts[SyncStatus.UNLINKED],
            net_mismatches=count_net_mismatches(mappings),
        )
