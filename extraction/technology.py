"""Technology (PDK) tables for parasitic extraction.

A Technology describes the layer stack the extractor works against: which
layers conduct, their sheet resistance, vertical position (for plate
capacitance), and the fixed contact resistance of each cut layer.

Usage:
    tech = SKY130
    m1 = tech.layer('M1')
    print(m1.sheet_resistance)          # 0.125 ohm/sq
    print(tech.via_for_cut('VIA1'))     # ViaDefinition(... resistance=4.5)
    tech.resolve_layer_alias('met1.drawing')  # 'M1'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# Layer materials recognised by the extractor
MATERIAL_METAL = 'metal'
MATERIAL_CUT = 'cut'
MATERIAL_POLY = 'poly'
MATERIAL_DIFFUSION = 'diffusion'
MATERIAL_WELL = 'well'


@dataclass(frozen=True)
class TechLayer:
    """A technology layer.

    Attributes:
        alias: Short alias used by layout geometry (e.g. 'M1')
        name: Full layer name (e.g. 'met1.drawing')
        material: metal / cut / poly / diffusion / well / implant
        purpose: drawing / pin / label ...
        sheet_resistance: Ohms per square, if known
        thickness: Layer thickness in microns, if known
        height: Height above substrate in microns, if known
    """
    alias: str
    name: str = ''
    material: str = MATERIAL_METAL
    purpose: str = 'drawing'
    sheet_resistance: Optional[float] = None
    thickness: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_routing_metal(self) -> bool:
        return self.material == MATERIAL_METAL and self.purpose == 'drawing'

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TechLayer':
        return cls(
            alias=d['alias'],
            name=d.get('name', ''),
            material=d.get('material', MATERIAL_METAL),
            purpose=d.get('purpose', 'drawing'),
            sheet_resistance=d.get('sheet_resistance', d.get('sheetResistance')),
            thickness=d.get('thickness'),
            height=d.get('height'),
        )


@dataclass(frozen=True)
class ViaDefinition:
    """A contact/via between two layers with a fixed per-cut resistance."""
    name: str
    cut_layer: str
    bottom_layer: str
    top_layer: str
    resistance: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ViaDefinition':
        return cls(
            name=d.get('name', d.get('cut_layer', d.get('cutLayer', ''))),
            cut_layer=d.get('cut_layer', d.get('cutLayer')),
            bottom_layer=d.get('bottom_layer', d.get('bottomLayer', '')),
            top_layer=d.get('top_layer', d.get('topLayer', '')),
            resistance=d.get('resistance'),
        )


@dataclass
class Technology:
    """Layer stack and device model names for one process.

    Attributes:
        name: Process name shown in the SPICE header
        layers: Ordered layer stack (extraction follows this order)
        vias: Cut layer definitions (extraction follows this order)
        nmos_model / pmos_model: Model names written for recognised MOS devices
        poly_layer / diffusion_layer / nwell_layer: Aliases of the layers
            used for transistor recognition
    """
    name: str
    layers: List[TechLayer] = field(default_factory=list)
    vias: List[ViaDefinition] = field(default_factory=list)
    nmos_model: str = 'nmos'
    pmos_model: str = 'pmos'
    poly_layer: str = 'POLY'
    diffusion_layer: str = 'DIFF'
    nwell_layer: str = 'NW'

    def __post_init__(self):
        self._by_alias: Dict[str, TechLayer] = {}
        self._lookup: Dict[str, str] = {}
        for layer in self.layers:
            self._by_alias.setdefault(layer.alias, layer)
            self._lookup.setdefault(layer.alias.upper(), layer.alias)
            if layer.name:
                self._lookup.setdefault(layer.name.upper(), layer.alias)
                # 'met1.drawing' also answers to 'met1'
                base = layer.name.split('.')[0].upper()
                if layer.purpose == 'drawing':
                    self._lookup.setdefault(base, layer.alias)
        self._via_by_cut: Dict[str, ViaDefinition] = {}
        for v in self.vias:
            self._via_by_cut.setdefault(v.cut_layer, v)

    def resolve_layer_alias(self, alias: str) -> str:
        """Map a layer alias or name onto the canonical alias.

        Matching is case-insensitive; unknown aliases are returned upper-cased.
        """
        key = (alias or '').strip().upper()
        return self._lookup.get(key, key)

    def layer(self, alias: str) -> Optional[TechLayer]:
        """Layer entry for a canonical alias, or None."""
        return self._by_alias.get(alias)

    def via_for_cut(self, cut_layer: str) -> Optional[ViaDefinition]:
        """Via definition whose cut layer is cut_layer, or None."""
        return self._via_by_cut.get(cut_layer)

    def routing_layers(self) -> List[TechLayer]:
        """Metal drawing layers in stack order."""
        return [l for l in self.layers if l.is_routing_metal]

    def metal_stack(self) -> List[TechLayer]:
        """Routing metals with height and thickness, sorted bottom to top."""
        stack = [l for l in self.routing_layers() if l.height is not None and l.thickness is not None]
        return sorted(stack, key=lambda l: l.height)

    @property
    def cut_layers(self) -> Tuple[str, ...]:
        return tuple(self._via_by_cut.keys())

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Technology':
        """Build from the PDK dict form (camelCase or snake_case keys)."""
        return cls(
            name=d.get('name', 'unnamed'),
            layers=[TechLayer.from_dict(l) for l in d.get('layers', [])],
            vias=[ViaDefinition.from_dict(v) for v in d.get('vias', [])],
            nmos_model=d.get('nmos_model', d.get('nmosModel', 'nmos')),
            pmos_model=d.get('pmos_model', d.get('pmosModel', 'pmos')),
            poly_layer=d.get('poly_layer', 'POLY'),
            diffusion_layer=d.get('diffusion_layer', 'DIFF'),
            nwell_layer=d.get('nwell_layer', 'NW'),
        )


# SkyWater 130nm stack (sheet resistance in ohm/sq, dimensions in microns)
SKY130 = Technology(
    name='SKY130',
    layers=[
        TechLayer('NW', 'nwell.drawing', MATERIAL_WELL, sheet_resistance=900, thickness=3.0, height=0.0),
        TechLayer('PW', 'pwell.drawing', MATERIAL_WELL, sheet_resistance=1050, thickness=3.0, height=0.0),
        TechLayer('DIFF', 'diff.drawing', MATERIAL_DIFFUSION, sheet_resistance=100, thickness=0.13, height=0.0),
        TechLayer('TAP', 'tap.drawing', MATERIAL_DIFFUSION),
        TechLayer('POLY', 'poly.drawing', MATERIAL_POLY, sheet_resistance=48, thickness=0.18, height=0.14),
        TechLayer('LI', 'li1.drawing', MATERIAL_METAL, sheet_resistance=12.5, thickness=0.1, height=0.93),
        TechLayer('LICON', 'licon.drawing', MATERIAL_CUT),
        TechLayer('MCON', 'mcon.drawing', MATERIAL_CUT),
        TechLayer('M1', 'met1.drawing', MATERIAL_METAL, sheet_resistance=0.125, thickness=0.36, height=1.02),
        TechLayer('VIA1', 'via.drawing', MATERIAL_CUT),
        TechLayer('M2', 'met2.drawing', MATERIAL_METAL, sheet_resistance=0.125, thickness=0.36, height=1.74),
        TechLayer('VIA2', 'via2.drawing', MATERIAL_CUT),
        TechLayer('M3', 'met3.drawing', MATERIAL_METAL, sheet_resistance=0.047, thickness=0.845, height=2.37),
        TechLayer('VIA3', 'via3.drawing', MATERIAL_CUT),
        TechLayer('M4', 'met4.drawing', MATERIAL_METAL, sheet_resistance=0.047, thickness=0.845, height=3.78),
        TechLayer('VIA4', 'via4.drawing', MATERIAL_CUT),
        TechLayer('M5', 'met5.drawing', MATERIAL_METAL, sheet_resistance=0.029, thickness=1.26, height=5.30),
        TechLayer('M1.PIN', 'met1.pin', MATERIAL_METAL, purpose='pin'),
        TechLayer('M2.PIN', 'met2.pin', MATERIAL_METAL, purpose='pin'),
    ],
    vias=[
        ViaDefinition('licon', 'LICON', 'DIFF', 'LI', resistance=120),
        ViaDefinition('mcon', 'MCON', 'LI', 'M1', resistance=9.3),
        ViaDefinition('via1', 'VIA1', 'M1', 'M2', resistance=4.5),
        ViaDefinition('via2', 'VIA2', 'M2', 'M3', resistance=3.4),
        ViaDefinition('via3', 'VIA3', 'M3', 'M4', resistance=3.4),
        ViaDefinition('via4', 'VIA4', 'M4', 'M5', resistance=0.38),
    ],
    nmos_model='sky130_fd_pr__nfet_01v8',
    pmos_model='sky130_fd_pr__pfet_01v8',
)
