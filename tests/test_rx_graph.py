"""Unit tests for the rustworkx parasitic graph wrapper.

Tests node/edge bookkeeping, multi-edge handling, orientation of incident
edges and construction from an extracted netlist.
"""

import unittest

from core.rx_graph import ParasiticGraph
from extraction.assembler import extract_netlist
from tests.fixtures import create_inverter_layout


class TestParasiticGraphNodes(unittest.TestCase):
    """Test node operations."""

    def test_add_node_basic(self):
        """Add nodes to empty graph."""
        g = ParasiticGraph()
        g.add_node('n0')
        g.add_node('n1')

        self.assertIn('n0', g)
        self.assertIn('n1', g)
        self.assertEqual(g.number_of_nodes(), 2)
        self.assertEqual(len(g), 2)

    def test_add_duplicate_node_merges_attrs(self):
        """Adding existing node updates attributes."""
        g = ParasiticGraph()
        g.add_node('n0', node_type='signal')
        g.add_node('n0', layer='M1')

        self.assertEqual(g.number_of_nodes(), 1)
        self.assertEqual(g.nodes_dict['n0'], {'node_type': 'signal', 'layer': 'M1'})

    def test_nodes_iteration_with_data(self):
        """Iterate nodes with attribute dicts in insertion order."""
        g = ParasiticGraph()
        g.add_node('VDD', node_type='power')
        g.add_node('GND', node_type='ground')

        self.assertEqual(list(g.nodes()), ['VDD', 'GND'])
        self.assertEqual(dict(g.nodes(data=True))['GND']['node_type'], 'ground')

    def test_degree_unknown_node_raises(self):
        """Degree of a missing node raises KeyError."""
        g = ParasiticGraph()
        with self.assertRaises(KeyError):
            g.degree('missing')


class TestParasiticGraphEdges(unittest.TestCase):
    """Test edge operations."""

    def test_add_edge_creates_nodes(self):
        """Adding an edge creates both endpoints."""
        g = ParasiticGraph()
        g.add_edge('n0', 'n1', type='R', value=1.0, name='R0')

        self.assertIn('n0', g)
        self.assertIn('n1', g)
        self.assertTrue(g.has_edge('n0', 'n1'))
        self.assertTrue(g.has_edge('n1', 'n0'))
        self.assertFalse(g.has_edge('n0', 'n2'))

    def test_parallel_edges_kept(self):
        """Two elements between the same nets stay distinct edges."""
        g = ParasiticGraph()
        g.add_edge('n0', 'n1', type='R', value=1.0, name='R0')
        g.add_edge('n0', 'n1', type='C', value=1e-15, name='C1')

        self.assertEqual(g.number_of_edges(), 2)
        self.assertEqual(g.degree('n0'), 2)
        names = [data['name'] for _, _, data in g.edges(data=True)]
        self.assertEqual(names, ['R0', 'C1'])

    def test_incident_edges_keep_orientation(self):
        """incident_edges reports endpoints in the order they were added."""
        g = ParasiticGraph()
        g.add_edge('n0', 'n1', type='R', value=1.0, name='R0')
        g.add_edge('n2', 'n0', type='R', value=2.0, name='R1')

        incident = g.incident_edges('n0')
        self.assertEqual(len(incident), 2)
        self.assertEqual([(u, v) for _, u, v, _ in incident], [('n0', 'n1'), ('n2', 'n0')])
        self.assertEqual(len({key for key, _, _, _ in incident}), 2)

    def test_incident_edges_unknown_node(self):
        """Unknown nodes have no incident edges."""
        self.assertEqual(ParasiticGraph().incident_edges('nope'), [])


class TestParasiticGraphAlgorithms(unittest.TestCase):
    """Test connectivity helpers."""

    def test_connected_components(self):
        """Components follow parasitic edges."""
        g = ParasiticGraph()
        g.add_edge('a', 'b', type='R', value=1.0, name='R0')
        g.add_edge('c', 'd', type='R', value=1.0, name='R1')
        g.add_node('e')

        components = g.connected_components()
        self.assertEqual(g.number_connected_components(), 3)
        self.assertIn({'a', 'b'}, components)
        self.assertIn({'e'}, components)

    def test_isolated_nodes_with_exclude(self):
        """Isolated nodes can exclude global nets."""
        g = ParasiticGraph()
        g.add_node('VDD')
        g.add_node('n5')
        g.add_edge('n0', 'n1', type='R', value=1.0, name='R0')

        self.assertEqual(sorted(g.isolated_nodes()), ['VDD', 'n5'])
        self.assertEqual(g.isolated_nodes(exclude=['VDD']), ['n5'])


class TestParasiticGraphFromNetlist(unittest.TestCase):
    """Test building the graph from an extraction result."""

    def test_from_netlist_counts(self):
        """One node per netlist node and one edge per parasitic."""
        netlist = extract_netlist(create_inverter_layout(), timestamp=0.0)
        g = ParasiticGraph.from_netlist(netlist)

        self.assertEqual(g.number_of_nodes(), len(netlist.nodes))
        self.assertEqual(g.number_of_edges(), len(netlist.parasitics))
        self.assertEqual(g.nodes_dict['VDD']['node_type'], 'power')

    def test_from_netlist_edge_attributes(self):
        """Edges carry type letter, value and element name."""
        netlist = extract_netlist(create_inverter_layout(), timestamp=0.0)
        g = ParasiticGraph.from_netlist(netlist)

        first = netlist.parasitics[0]
        incident = g.incident_edges(first.node_a)
        self.assertEqual(len(incident), 1)
        _, u, v, data = incident[0]
        self.assertEqual((u, v), (first.node_a, first.node_b))
        self.assertEqual(data, {'type': 'R', 'value': first.value, 'name': first.name})


if __name__ == '__main__':
    unittest.main()
