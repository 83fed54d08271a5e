"""Test fixtures for extraction and sync unit tests.

Provides factory functions for small layouts with hand-checkable results
and for schematic/layout device lists.
"""

from typing import List

from extraction.geometry import Geometry, path, rect, via
from extraction.netlist import DeviceType, NetlistDevice
from schematic_sync.types import SchematicDevice, SchematicPin


def create_inverter_layout() -> List[Geometry]:
    """CMOS inverter: one vertical poly over an NMOS and a PMOS diffusion.

    Expected extraction (SKY130):
        M0  nmos  W=0.42 L=0.15  geometry [3, 1]
        M1  pmos  W=0.84 L=0.15  geometry [3, 2]
        R0  LI rect     2.0 x 0.17     -> 147.059 Ohm
        R1  M1 path     10 um, w 0.14  -> 8.929 Ohm
        R2  M1 rect     4.0 x 0.5      -> 1.0 Ohm
        R3  MCON cut                   -> 9.3 Ohm
        R4  VIA1 cut                   -> 4.5 Ohm
    """
    return [
        rect(0, 'NW', 0.0, 4.0, 4.0, 8.0),
        rect(1, 'DIFF', 0.5, 1.0, 2.5, 1.42),
        rect(2, 'DIFF', 0.5, 5.0, 2.5, 5.84),
        rect(3, 'POLY', 1.425, 0.5, 1.575, 6.5),
        path(4, 'M1', [(0.0, 0.0), (10.0, 0.0)], width=0.14),
        rect(5, 'M1', 0.0, 3.0, 4.0, 3.5),
        rect(6, 'li1', 0.0, 2.0, 2.0, 2.17),
        via(7, 'MCON', 1.0, 3.25, 0.17),
        via(8, 'VIA1', 3.0, 3.25, 0.15),
    ]


def create_two_finger_layout(offset: float = 0.0) -> List[Geometry]:
    """Two poly fingers over one NMOS diffusion (no n-well), shifted by offset."""
    return [
        rect(0, 'DIFF', offset + 0.0, 0.0, offset + 3.0, 0.65),
        rect(1, 'POLY', offset + 0.9, -0.2, offset + 1.05, 0.85),
        rect(2, 'POLY', offset + 1.9, -0.2, offset + 2.05, 0.85),
        path(3, 'M1', [(offset, 1.0), (offset + 3.0, 1.0), (offset + 3.0, 3.0)], width=0.2),
    ]


def create_schematic_devices() -> List[SchematicDevice]:
    """Schematic side of the inverter scenario: M0, M1 and a resistor R0."""
    return [
        SchematicDevice(
            id='s1', instance_name='M0', device_type='nmos',
            pins=(SchematicPin('D', 'OUT'), SchematicPin('G', 'IN'),
                  SchematicPin('S', 'VSS'), SchematicPin('B', 'VSS')),
            parameters={'w': 0.42, 'l': 0.15},
        ),
        SchematicDevice(
            id='s2', instance_name='M1', device_type='pmos',
            pins=(SchematicPin('D', 'OUT'), SchematicPin('G', 'IN'),
                  SchematicPin('S', 'VDD'), SchematicPin('B', 'VDD')),
            parameters={'w': 0.84, 'l': 0.15},
        ),
        SchematicDevice(
            id='s3', instance_name='R0', device_type='resistor',
            pins=(SchematicPin('A', 'OUT'), SchematicPin('B', 'net1')),
            parameters={'r': 1000},
        ),
    ]


def create_layout_devices() -> List[NetlistDevice]:
    """Layout side of the inverter scenario: M0, M1 (w off by 4.76%) and an extra M2."""
    return [
        nmos('M0', w=0.42, l=0.15, terminals=('OUT', 'IN', 'VSS', 'VSS'), geometry=(0, 1)),
        pmos('M1', w=0.80, l=0.15, terminals=('OUT', 'IN', 'VDD', 'VDD'), geometry=(2, 3)),
        nmos('M2', w=0.42, l=0.15, terminals=('net2', 'ctrl', 'VSS', 'VSS'), geometry=(4, 5)),
    ]


def nmos(name, w, l, terminals=('d', 'g', 's', 'GND'), geometry=(), **params) -> NetlistDevice:
    return _mos(name, DeviceType.NMOS, 'sky130_fd_pr__nfet_01v8', w, l, terminals, geometry, params)


def pmos(name, w, l, terminals=('d', 'g', 's', 'VDD'), geometry=(), **params) -> NetlistDevice:
    return _mos(name, DeviceType.PMOS, 'sky130_fd_pr__pfet_01v8', w, l, terminals, geometry, params)


def _mos(name, device_type, model, w, l, terminals, geometry, params) -> NetlistDevice:
    drain, gate, source, body = terminals
    parameters = {'w': w, 'l': l}
    parameters.update(params)
    return NetlistDevice(
        name=name,
        device_type=device_type,
        model=model,
        terminals={'drain': drain, 'gate': gate, 'source': source, 'body': body},
        parameters=parameters,
        geometry_indices=tuple(geometry),
    )
