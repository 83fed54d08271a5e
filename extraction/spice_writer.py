"""SPICE deck writer for extracted netlists.

Deck layout:

    * <title>
    * PDK: <technology>
    * Date: <ISO-8601 timestamp>

    .global VDD GND

    * Power supply
    VDD VDD GND 1.8

    * Devices
    M0 n0 n1 n2 GND sky130_fd_pr__nfet_01v8 W=0.65u L=0.15u

    * Parasitic elements
    R0 n3 n4 2.500

    * Simulation
    .tran 1p 10n
    .end

The Devices and Parasitic elements blocks are omitted when empty. The Date
line is the only non-deterministic line; pass a timestamp to pin it.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .netlist import NetlistDevice, ParasiticElement
from .technology import Technology

logger = logging.getLogger(__name__)

SUPPLY_VOLTAGE = 1.8
TRAN_COMMAND = '.tran 1p 10n'

# (threshold, scale, suffix), checked top to bottom
SI_BANDS = (
    (1e6, 1e-6, 'M'),
    (1e3, 1e-3, 'k'),
    (1.0, 1.0, ''),
    (1e-3, 1e3, 'm'),
    (1e-6, 1e6, 'u'),
    (1e-9, 1e9, 'n'),
    (1e-12, 1e12, 'p'),
    (1e-15, 1e15, 'f'),
)


def format_spice_value(value: float) -> str:
    """Format a component value with an SI suffix and 3 decimals.

    Values below 1e-15 fall back to scientific notation:

        format_spice_value(2500.0)    -> '2.500k'
        format_spice_value(2.3e-15)   -> '2.300f'
        format_spice_value(1.234e-16) -> '1.234e-16'
    """
    for threshold, scale, suffix in SI_BANDS:
        if value >= threshold:
            return f"{value * scale:.3f}{suffix}"
    mantissa, exponent = f"{value:.3e}".split('e')
    return f"{mantissa}e{int(exponent):+d}"


def format_number(value: float) -> str:
    """Shortest plain rendering of a parameter (0.65 -> '0.65', 1.0 -> '1')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def iso_timestamp(timestamp: Optional[float] = None) -> str:
    """UTC ISO-8601 string with millisecond precision."""
    ts = time.time() if timestamp is None else timestamp
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


class SpiceWriter:
    """Serialize devices and parasitics into a SPICE deck.

    Example:
        writer = SpiceWriter(SKY130)
        text = writer.write("Extracted Netlist", devices, parasitics, timestamp=0.0)
    """

    def __init__(self, technology: Technology, supply_voltage: float = SUPPLY_VOLTAGE):
        self.technology = technology
        self.supply_voltage = supply_voltage

    def write(
        self,
        title: str,
        devices: Iterable[NetlistDevice],
        parasitics: Iterable[ParasiticElement],
        timestamp: Optional[float] = None,
    ) -> str:
        """Return the deck as a single newline-joined string."""
        devices = list(devices)
        parasitics = list(parasitics)

        lines: List[str] = []
        lines.append(f"* {title}")
        lines.append(f"* PDK: {self.technology.name}")
        lines.append(f"* Date: {iso_timestamp(timestamp)}")
        lines.append("")

        lines.append(".global VDD GND")
        lines.append("")

        lines.append("* Power supply")
        lines.append(f"VDD VDD GND {format_number(self.supply_voltage)}")
        lines.append("")

        if devices:
            lines.append("* Devices")
            for d in devices:
                line = self.device_line(d)
                if line is not None:
                    lines.append(line)
            lines.append("")

        if parasitics:
            lines.append("* Parasitic elements")
            for p in parasitics:
                lines.append(f"{p.name} {p.node_a} {p.node_b} {format_spice_value(p.value)}")
            lines.append("")

        lines.append("* Simulation")
        lines.append(TRAN_COMMAND)
        lines.append(".end")

        logger.debug(f"Wrote SPICE deck with {len(devices)} devices, {len(parasitics)} parasitics")
        return "\n".join(lines)

    @staticmethod
    def device_line(device: NetlistDevice) -> Optional[str]:
        """One instance line, or None for device types without a card."""
        t = device.terminals
        p = device.parameters
        if device.device_type.is_mos:
            line = (f"{device.name} {t.get('drain', '')} {t.get('gate', '')} {t.get('source', '')} "
                    f"{t.get('body', '')} {device.model} "
                    f"W={format_number(p.get('w', 0))}u L={format_number(p.get('l', 0))}u")
            if p.get('nf', 1) > 1:
                line += f" NF={format_number(p['nf'])}"
            if p.get('mult', 1) > 1:
                line += f" MULT={format_number(p['mult'])}"
            return line
        if device.device_type.value == 'resistor':
            return (f"{device.name} {t.get('plus', '')} {t.get('minus', '')} {device.model} "
                    f"W={format_number(p.get('w', 0))}u L={format_number(p.get('l', 0))}u")
        return None
