"""Unit tests for parasitic resistance and plate capacitance extraction."""

import unittest

from extraction.capacitance import CapacitanceExtractor, EPSILON_OX, plate_capacitance
from extraction.context import ExtractionContext
from extraction.geometry import BBox, Geometry, GeometryType, group_by_layer, path, rect, via
from extraction.netlist import ParasiticType
from extraction.parasitic_extractor import ParasiticExtractor, wire_resistance
from extraction.technology import SKY130, TechLayer, Technology
from tests.fixtures import create_inverter_layout


def extract(geoms, technology=SKY130, context=None):
    ctx = context or ExtractionContext()
    return ParasiticExtractor(technology).extract(group_by_layer(geoms, technology), ctx)


class TestWireResistance(unittest.TestCase):
    """Test wire resistor formulas."""

    def test_formula(self):
        """R = sheet * length / width."""
        self.assertAlmostEqual(wire_resistance(0.125, 10.0, 0.5), 2.5)
        self.assertEqual(wire_resistance(0.125, 10.0, 0.0), 0.0)

    def test_path_resistance(self):
        """Path length is the polyline length."""
        geoms = [path(0, 'M1', [(0, 0), (3, 0), (3, 4)], width=0.5)]
        (r,) = extract(geoms)
        self.assertEqual(r.element_type, ParasiticType.RESISTOR)
        self.assertAlmostEqual(r.value, 0.125 * 7 / 0.5)
        self.assertEqual(r.layer, 'M1')
        self.assertEqual(r.geometry_index, 0)

    def test_path_default_width(self):
        """Paths without a width use 0.14 um."""
        geoms = [path(0, 'M2', [(0, 0), (1.4, 0)])]
        (r,) = extract(geoms)
        self.assertAlmostEqual(r.value, 1.25)

    def test_rect_uses_long_side_as_length(self):
        """Rect orientation does not matter."""
        horizontal = extract([rect(0, 'M1', 0, 0, 4, 0.5)])
        vertical = extract([rect(0, 'M1', 0, 0, 0.5, 4)])
        self.assertAlmostEqual(horizontal[0].value, 1.0)
        self.assertAlmostEqual(vertical[0].value, 1.0)

    def test_values_rounded_to_milliohms(self):
        """Kept values are rounded to 3 decimals."""
        (r,) = extract([path(0, 'M1', [(0, 0), (10, 0)], width=0.14)])
        self.assertEqual(r.value, 8.929)

    def test_noise_floor(self):
        """Resistances below 0.01 Ohm are discarded."""
        geoms = [path(0, 'M1', [(0, 0), (0.05, 0)], width=1.0)]  # 0.00625 Ohm
        self.assertEqual(extract(geoms), [])

    def test_polygon_and_short_path_skipped(self):
        """Polygons and single-point paths carry no resistor."""
        ctx = ExtractionContext()
        geoms = [
            path(0, 'M1', [(0, 0)], width=0.2),
            Geometry(1, GeometryType.POLYGON, 'M1', BBox(0, 0, 1, 1), ((0, 0), (1, 0), (0, 1))),
        ]
        self.assertEqual(extract(geoms, context=ctx), [])
        self.assertEqual(ctx.skipped_geometries['M1'], 1)


class TestViaResistance(unittest.TestCase):
    """Test fixed contact resistances."""

    def test_via_values(self):
        """Each cut gives one resistor of the cut layer's resistance."""
        geoms = [via(0, 'MCON', 0, 0, 0.17), via(1, 'VIA1', 1, 1, 0.15), via(2, 'VIA4', 2, 2, 0.8)]
        values = [r.value for r in extract(geoms)]
        self.assertEqual(values, [9.3, 4.5, 0.38])

    def test_wires_before_vias(self):
        """Wires come first (technology layer order), then vias (via table order)."""
        resistors = extract(create_inverter_layout())
        self.assertEqual([r.layer for r in resistors], ['LI', 'M1', 'M1', 'MCON', 'VIA1'])
        self.assertEqual([r.name for r in resistors], ['R0', 'R1', 'R2', 'R3', 'R4'])
        self.assertEqual([r.value for r in resistors], [147.059, 8.929, 1.0, 9.3, 4.5])


class TestNetNames(unittest.TestCase):
    """Test endpoint allocation."""

    def test_two_fresh_nets_per_resistor(self):
        """Every resistor has two unique endpoints."""
        resistors = extract(create_inverter_layout())
        endpoints = [n for r in resistors for n in (r.node_a, r.node_b)]
        self.assertEqual(len(endpoints), len(set(endpoints)))
        self.assertEqual(endpoints[:2], ['n0', 'n1'])


class TestMissingTechnologyData(unittest.TestCase):
    """Test layers the technology cannot model."""

    def test_unknown_layer_recorded(self):
        """Layers absent from the table are counted, not extracted."""
        ctx = ExtractionContext()
        extractor = ParasiticExtractor(SKY130)
        by_layer = group_by_layer([rect(0, 'CUSTOM', 0, 0, 1, 1), rect(1, 'M1', 0, 0, 4, 0.5)], SKY130)

        resistors = extractor.extract(by_layer, ctx)
        extractor.unknown_layers(by_layer, ctx)

        self.assertEqual(len(resistors), 1)
        self.assertEqual(dict(ctx.skipped_layers), {'CUSTOM': 1})

    def test_layer_without_sheet_resistance(self):
        """A metal with no sheet resistance is skipped as a whole."""
        tech = Technology('T', layers=[TechLayer('MX', 'mx.drawing')])
        ctx = ExtractionContext()
        self.assertEqual(extract([rect(0, 'MX', 0, 0, 4, 1)], tech, ctx), [])
        self.assertEqual(ctx.skipped_layers['MX'], 1)


class TestPlateCapacitance(unittest.TestCase):
    """Test the opt-in plate capacitance model."""

    def test_plate_formula(self):
        """C = eps_ox * A / d."""
        self.assertAlmostEqual(plate_capacitance(10.0, 1.2) / (EPSILON_OX * 10.0 / 1.2), 1.0)
        self.assertEqual(plate_capacitance(10.0, 0.0), 0.0)

    def test_substrate_and_interlayer(self):
        """M1 substrate caps plus one M1/M2 overlap cap."""
        geoms = [rect(0, 'M1', 0, 0, 10, 1), rect(1, 'M2', 5, 0, 15, 1)]
        caps = CapacitanceExtractor(SKY130).extract(group_by_layer(geoms, SKY130), ExtractionContext())

        substrate = [c for c in caps if c.node_b == 'GND']
        interlayer = [c for c in caps if c.node_b != 'GND']
        self.assertEqual(len(substrate), 2)
        self.assertEqual(len(interlayer), 1)

        m1 = SKY130.layer('M1')
        m2 = SKY130.layer('M2')
        expected_sub = EPSILON_OX * 10.0 / (m1.height + m1.thickness / 2)
        expected_inter = EPSILON_OX * 5.0 / (m2.height - (m1.height + m1.thickness))
        self.assertAlmostEqual(substrate[0].value / expected_sub, 1.0)
        self.assertAlmostEqual(interlayer[0].value / expected_inter, 1.0)
        for c in caps:
            self.assertEqual(c.element_type, ParasiticType.CAPACITOR)
            self.assertTrue(c.name.startswith('C'))

    def test_tiny_capacitance_dropped(self):
        """Capacitances at or below 1e-21 F are dropped."""
        geoms = [rect(0, 'M5', 0, 0, 1e-4, 1e-4)]
        caps = CapacitanceExtractor(SKY130).extract(group_by_layer(geoms, SKY130), ExtractionContext())
        self.assertEqual(caps, [])


if __name__ == '__main__':
    unittest.main()
