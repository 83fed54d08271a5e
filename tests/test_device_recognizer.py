"""Unit tests for MOS device recognition.

Tests cover:
- Gate W/L from the poly/diffusion intersection
- NMOS/PMOS classification by n-well containment
- Fresh nets per device and body tie-off
- Degenerate and non-overlapping shapes
- Cancellation between poly shapes
"""

import unittest

from extraction.context import CancellationToken, ExtractionCancelled, ExtractionContext
from extraction.device_recognizer import DeviceRecognizer
from extraction.geometry import Geometry, GeometryType, BBox, group_by_layer, rect
from extraction.netlist import DeviceType
from extraction.technology import SKY130
from tests.fixtures import create_inverter_layout, create_two_finger_layout


def recognize(geoms, context=None):
    recognizer = DeviceRecognizer(SKY130)
    return recognizer.recognize(group_by_layer(geoms, SKY130), context or ExtractionContext())


class TestGateGeometry(unittest.TestCase):
    """Test W/L extraction."""

    def test_inverter_devices(self):
        """Inverter yields one NMOS and one PMOS with expected W/L."""
        devices = recognize(create_inverter_layout())

        self.assertEqual(len(devices), 2)
        m0, m1 = devices
        self.assertEqual(m0.name, 'M0')
        self.assertEqual(m0.device_type, DeviceType.NMOS)
        self.assertEqual(m0.parameters, {'w': 0.42, 'l': 0.15, 'nf': 1, 'mult': 1})
        self.assertEqual(m0.geometry_indices, (3, 1))

        self.assertEqual(m1.name, 'M1')
        self.assertEqual(m1.device_type, DeviceType.PMOS)
        self.assertAlmostEqual(m1.parameters['w'], 0.84)
        self.assertAlmostEqual(m1.parameters['l'], 0.15)
        self.assertEqual(m1.geometry_indices, (3, 2))

    def test_models_from_technology(self):
        """Model names come from the technology table."""
        m0, m1 = recognize(create_inverter_layout())
        self.assertEqual(m0.model, SKY130.nmos_model)
        self.assertEqual(m1.model, SKY130.pmos_model)

    def test_two_fingers_are_two_devices(self):
        """Each poly finger over the diffusion is a separate device."""
        devices = recognize(create_two_finger_layout())

        self.assertEqual([d.name for d in devices], ['M0', 'M1'])
        for d in devices:
            self.assertEqual(d.device_type, DeviceType.NMOS)
            self.assertAlmostEqual(d.parameters['w'], 0.65)
            self.assertAlmostEqual(d.parameters['l'], 0.15)

    def test_overlapping_windows_not_deduplicated(self):
        """Two identical poly shapes produce two devices."""
        geoms = [
            rect(0, 'DIFF', 0, 0, 2, 1),
            rect(1, 'POLY', 0.9, -0.5, 1.1, 1.5),
            rect(2, 'POLY', 0.9, -0.5, 1.1, 1.5),
        ]
        self.assertEqual(len(recognize(geoms)), 2)


class TestDeviceTerminals(unittest.TestCase):
    """Test net allocation."""

    def test_fresh_nets_per_device(self):
        """Drain/gate/source are fresh and never shared between devices."""
        m0, m1 = recognize(create_inverter_layout())

        self.assertEqual(m0.terminals, {'drain': 'n0', 'gate': 'n1', 'source': 'n2', 'body': 'GND'})
        self.assertEqual(m1.terminals, {'drain': 'n3', 'gate': 'n4', 'source': 'n5', 'body': 'VDD'})

    def test_nwell_boundary_is_inclusive(self):
        """A diffusion centred exactly on the n-well edge is PMOS."""
        geoms = [
            rect(0, 'NW', 0, 0, 2, 1),        # top edge at y=1
            rect(1, 'DIFF', 0, 0.5, 2, 1.5),  # center y=1
            rect(2, 'POLY', 0.9, 0, 1.1, 2),
        ]
        devices = recognize(geoms)
        self.assertEqual(devices[0].device_type, DeviceType.PMOS)


class TestEdgeCases(unittest.TestCase):
    """Test inputs that produce no devices."""

    def test_no_poly(self):
        """Zero devices is a valid result."""
        self.assertEqual(recognize([rect(0, 'DIFF', 0, 0, 1, 1)]), [])

    def test_touching_edges_do_not_overlap(self):
        """Poly abutting a diffusion is not a transistor."""
        geoms = [rect(0, 'DIFF', 0, 0, 1, 1), rect(1, 'POLY', 1, 0, 1.2, 1)]
        self.assertEqual(recognize(geoms), [])

    def test_degenerate_shapes_skipped(self):
        """Zero-area and point-less shapes are skipped and counted."""
        ctx = ExtractionContext()
        geoms = [
            rect(0, 'DIFF', 0, 0, 2, 1),
            rect(1, 'POLY', 1, -1, 1, 2),  # zero width
            Geometry(2, GeometryType.POLYGON, 'POLY', BBox(0.9, -1, 1.1, 2)),  # no points
        ]
        self.assertEqual(recognize(geoms, ctx), [])
        self.assertEqual(ctx.skipped_geometries['POLY'], 2)

    def test_layer_alias_case_insensitive(self):
        """Layer names resolve case-insensitively."""
        geoms = [rect(0, 'diff', 0, 0, 2, 1), rect(1, 'poly.drawing', 0.9, -0.5, 1.1, 1.5)]
        self.assertEqual(len(recognize(geoms)), 1)


class TestCancellation(unittest.TestCase):
    """Test cancellation checks."""

    def test_cancelled_token_raises(self):
        """A cancelled token stops recognition."""
        token = CancellationToken()
        token.cancel()
        with self.assertRaises(ExtractionCancelled):
            recognize(create_inverter_layout(), ExtractionContext(token))


if __name__ == '__main__':
    unittest.main()
