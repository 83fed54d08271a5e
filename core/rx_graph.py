"""Rustworkx graph wrapper for extracted parasitic connectivity.

Nets are graph nodes keyed by name; every parasitic element is one edge
carrying the element attributes used throughout the netlist:

    {'type': 'R' | 'C', 'value': <ohms | farads>, 'name': <instance name>}

Key differences from a plain rustworkx graph:
- rustworkx uses integer indices for nodes, not arbitrary keys
- The wrapper maintains bidirectional mappings (key <-> index)
- Parallel edges are kept (two resistors between the same nets stay distinct)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, TYPE_CHECKING

import rustworkx as rx

if TYPE_CHECKING:
    from extraction.netlist import ExtractedNetlist


class ParasiticGraph:
    """Undirected multigraph of nets joined by parasitic elements.

    Example:
        g = ParasiticGraph()
        g.add_edge('n0', 'n1', type='R', value=12.5, name='R0')
        g.add_edge('n0', 'GND', type='C', value=1e-15, name='C1')
        for key, u, v, data in g.incident_edges('n0'):
            print(f"{data['name']}: {u} -- {v}")
    """

    def __init__(self):
        """Initialize empty undirected multigraph."""
        self._graph: rx.PyGraph = rx.PyGraph(multigraph=True)
        self._node_to_idx: Dict[Any, int] = {}
        self._idx_to_node: Dict[int, Any] = {}
        self._node_attrs: Dict[Any, Dict[str, Any]] = {}

    @classmethod
    def from_netlist(cls, netlist: "ExtractedNetlist") -> "ParasiticGraph":
        """Build the graph for an extracted netlist.

        Every netlist node becomes a graph node (tagged with its node type),
        every parasitic element an edge from node_a to node_b.
        """
        graph = cls()
        for node in netlist.nodes:
            graph.add_node(node.name, node_type=node.node_type.value)
        for element in netlist.parasitics:
            graph.add_edge(
                element.node_a,
                element.node_b,
                type=element.element_type.spice_prefix,
                value=element.value,
                name=element.name,
            )
        return graph

    # =========================================================================
    # Node Operations
    # =========================================================================

    def add_node(self, node: Any, **attrs) -> int:
        """Add a node with optional attributes.

        If node already exists, updates its attributes.

        Returns:
            rustworkx index of the node
        """
        if node in self._node_to_idx:
            self._node_attrs[node].update(attrs)
            return self._node_to_idx[node]

        idx = self._graph.add_node(node)
        self._node_to_idx[node] = idx
        self._idx_to_node[idx] = node
        self._node_attrs[node] = dict(attrs)
        return idx

    def has_node(self, node: Any) -> bool:
        """Check if node exists in graph."""
        return node in self._node_to_idx

    def __contains__(self, node: Any) -> bool:
        """Support 'node in graph' syntax."""
        return node in self._node_to_idx

    def nodes(self, data: bool = False) -> Iterator:
        """Iterate over nodes, optionally with data."""
        if data:
            yield from self._node_attrs.items()
        else:
            yield from self._node_attrs.keys()

    @property
    def nodes_dict(self) -> Dict[Any, Dict[str, Any]]:
        """Direct access to node attributes dict."""
        return self._node_attrs

    def number_of_nodes(self) -> int:
        """Return number of nodes."""
        return self._graph.num_nodes()

    def __len__(self) -> int:
        return self._graph.num_nodes()

    # =========================================================================
    # Edge Operations
    # =========================================================================

    def add_edge(self, u: Any, v: Any, **attrs) -> int:
        """Add an undirected edge between u and v, creating missing nodes.

        Returns:
            Edge index (stable key for this edge)
        """
        u_idx = self.add_node(u) if u not in self._node_to_idx else self._node_to_idx[u]
        v_idx = self.add_node(v) if v not in self._node_to_idx else self._node_to_idx[v]
        return self._graph.add_edge(u_idx, v_idx, attrs)

    def has_edge(self, u: Any, v: Any) -> bool:
        """Check if any edge joins u and v."""
        u_idx = self._node_to_idx.get(u)
        v_idx = self._node_to_idx.get(v)
        if u_idx is None or v_idx is None:
            return False
        return self._graph.has_edge(u_idx, v_idx)

    def edges(self, data: bool = False) -> Iterator[Tuple]:
        """Iterate over all edges in insertion order.

        Yields:
            (u, v) or (u, v, data) tuples, u/v in the order they were added
        """
        for edge_idx in self._graph.edge_indices():
            u, v, edge_data = self._edge(edge_idx)
            yield (u, v, edge_data) if data else (u, v)

    def incident_edges(self, node: Any) -> List[Tuple[int, Any, Any, Dict[str, Any]]]:
        """Return (key, u, v, data) for every edge touching node.

        u/v keep the orientation the edge was added with, so callers can tell
        node_a from node_b. Unknown nodes have no incident edges.
        """
        idx = self._node_to_idx.get(node)
        if idx is None:
            return []
        result = []
        for edge_idx in sorted(self._graph.incident_edges(idx)):
            u, v, edge_data = self._edge(edge_idx)
            result.append((edge_idx, u, v, edge_data))
        return result

    def _edge(self, edge_idx: int) -> Tuple[Any, Any, Dict[str, Any]]:
        u_idx, v_idx = self._graph.get_edge_endpoints_by_index(edge_idx)
        return (
            self._idx_to_node[u_idx],
            self._idx_to_node[v_idx],
            self._graph.get_edge_data_by_index(edge_idx),
        )

    def number_of_edges(self) -> int:
        """Return number of edges."""
        return self._graph.num_edges()

    def degree(self, node: Any) -> int:
        """Return degree of node (parallel edges counted separately)."""
        idx = self._node_to_idx.get(node)
        if idx is None:
            raise KeyError(f"Node {node} not in graph")
        return self._graph.degree(idx)

    # =========================================================================
    # Algorithms
    # =========================================================================

    def connected_components(self) -> List[Set[Any]]:
        """Return list of sets of nodes, one set per connected component."""
        return [
            {self._idx_to_node[idx] for idx in comp}
            for comp in rx.connected_components(self._graph)
        ]

    def number_connected_components(self) -> int:
        """Return number of connected components."""
        return rx.number_connected_components(self._graph)

    def isolated_nodes(self, exclude: Optional[Iterable[Any]] = None) -> List[Any]:
        """Return nodes with no incident parasitic edge."""
        skip = set(exclude or ())
        return [
            node for node, idx in self._node_to_idx.items()
            if node not in skip and self._graph.degree(idx) == 0
        ]

    @property
    def rx_graph(self) -> rx.PyGraph:
        """Access underlying rustworkx graph (for direct rx algorithm calls)."""
        return self._graph
