"""Unit tests for layout placement suggestions."""

import unittest

from extraction.geometry import rect
from schematic_sync.mapper import build_sync_mappings
from schematic_sync.placement import PLACE_PITCH_Y, layout_extent, suggest_layout_placements
from schematic_sync.types import SchematicDevice, SyncMapping
from tests.fixtures import create_inverter_layout, create_layout_devices, create_schematic_devices


class TestPlacement(unittest.TestCase):
    """Test row placement to the right of the layout."""

    def test_layout_extent(self):
        self.assertEqual(layout_extent(create_inverter_layout()), (10.0, 8.0))
        self.assertEqual(layout_extent([]), (0.0, 0.0))

    def test_row_positions(self):
        """Each missing device steps 2 um further right at y = 3."""
        mappings = [
            SyncMapping('s1', 'M0'),
            SyncMapping('s3', 'R0', has_layout=False),
            SyncMapping('s4', 'C0', has_layout=False),
        ]
        geoms = [rect(0, 'M1', 0, 0, 5, 1)]
        suggestions = suggest_layout_placements(mappings, geoms)

        self.assertEqual([s.instance_name for s in suggestions], ['R0', 'C0'])
        self.assertEqual([(s.x, s.y) for s in suggestions], [(7.0, PLACE_PITCH_Y), (9.0, PLACE_PITCH_Y)])
        self.assertEqual(suggestions[0].device_type, '')

    def test_device_type_from_schematic(self):
        schematic = create_schematic_devices()
        mappings = build_sync_mappings(schematic, create_layout_devices())
        (suggestion,) = suggest_layout_placements(mappings, [], schematic)

        self.assertEqual(suggestion.instance_name, 'R0')
        self.assertEqual(suggestion.schematic_id, 's3')
        self.assertEqual(suggestion.device_type, 'resistor')
        self.assertEqual(suggestion.x, 2.0)

    def test_unknown_schematic_id(self):
        schematic = [SchematicDevice('other', 'X0', 'nmos')]
        mappings = [SyncMapping('s9', 'R9', has_layout=False)]
        (suggestion,) = suggest_layout_placements(mappings, [], schematic)
        self.assertEqual(suggestion.device_type, '')


if __name__ == '__main__':
    unittest.main()
