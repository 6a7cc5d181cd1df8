"""
Tests for the SpaceGraph Container
==================================

Covers:
1. Room creation and lookup
2. Connect / disconnect bookkeeping
3. Adjacency conversions
4. Derived properties (critical path, completeness, planarity)

Run: pytest tests/test_space_graph.py -v
"""

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dungeon_topology.core.space_graph import Edge, SpaceGraph, room_id


def make_graph(num_rooms, arcs=()):
    graph = SpaceGraph()
    for room in range(num_rooms):
        graph.create_node(room)
    for parent, child in arcs:
        graph.connect(parent, child)
    return graph


class TestConstruction:

    def test_entrance_and_goal(self):
        graph = make_graph(6)
        assert graph.entrance.id == 0
        assert graph.goal.id == 5
        assert len(graph) == 6
        assert [node.id for node in graph.nodes] == list(range(6))

    def test_duplicate_room_rejected(self):
        graph = make_graph(2)
        with pytest.raises(ValueError):
            graph.create_node(1)

    def test_unknown_room_lookup(self):
        graph = make_graph(2)
        with pytest.raises(KeyError):
            graph.node(5)

    def test_copy_is_independent(self):
        graph = make_graph(3, [(0, 1)])
        clone = graph.copy()
        clone.connect(1, 2)
        clone.node(2).depth = 4

        assert graph.node(1).edges == []
        assert graph.node(2).depth is None
        assert clone.node(1).children == [2]


class TestConnect:

    def test_connect_grows_only_parent(self):
        graph = make_graph(2)
        graph.connect(0, 1)
        assert graph.node(0).own_degree == 1
        assert graph.node(1).own_degree == 0
        assert graph.edges == [Edge(parent=0, child=1)]

    def test_connect_accepts_nodes(self):
        graph = make_graph(2)
        graph.connect(graph.node(1), graph.node(0))
        assert graph.node(1).children == [0]

    def test_self_connect_ignored(self, caplog):
        graph = make_graph(2)
        with caplog.at_level(logging.DEBUG, logger='dungeon_topology.core.space_graph'):
            graph.connect(1, 1)
        assert graph.edges == []
        assert "same room [1]" in caplog.text

    def test_connect_is_idempotent(self):
        graph = make_graph(2)
        graph.connect(0, 1)
        graph.connect(0, 1)
        assert graph.node(0).own_degree == 1

    def test_reciprocal_arcs_counted_per_room(self):
        graph = make_graph(2, [(0, 1), (1, 0)])
        assert graph.node(0).own_degree == 1
        assert graph.node(1).own_degree == 1
        assert graph.undirected_edge_count() == 1

    def test_disconnect(self):
        graph = make_graph(3, [(0, 1), (0, 2)])
        graph.disconnect(0, 1)
        assert graph.node(0).children == [2]

    def test_disconnect_absent_is_noop(self):
        graph = make_graph(3, [(0, 1)])
        graph.disconnect(1, 0)
        graph.disconnect(2, 0)
        assert graph.edges == [Edge(parent=0, child=1)]

    def test_room_id_accepts_nodes_and_ids(self):
        graph = make_graph(3)
        assert room_id(graph.node(2)) == 2
        assert room_id(2) == 2

    def test_connect_unknown_room(self):
        graph = make_graph(2)
        with pytest.raises(KeyError):
            graph.connect(0, 9)


class TestAdjacency:

    def test_matrix_holds_own_arcs_only(self):
        graph = make_graph(3, [(0, 1), (2, 1)])
        matrix = graph.to_adjacency_matrix()
        assert matrix.shape == (3, 3)
        assert matrix.dtype == np.uint8
        expected = np.array([[0, 1, 0], [0, 0, 0], [0, 1, 0]], dtype=np.uint8)
        np.testing.assert_array_equal(matrix, expected)

    def test_directed_list(self):
        graph = make_graph(3, [(0, 1), (2, 1)])
        assert graph.to_adjacency_list(undirected=False) == [[1], [], [1]]

    def test_undirected_list_mirrors(self):
        graph = make_graph(3, [(0, 1), (2, 1)])
        assert graph.to_adjacency_list() == [[1], [0, 2], [1]]

    def test_undirected_list_dedups_reciprocal_arcs(self):
        graph = make_graph(2, [(0, 1), (1, 0)])
        assert graph.to_adjacency_list() == [[1], [0]]

    def test_extra_arcs_do_not_commit(self):
        graph = make_graph(3, [(0, 1)])
        assert graph.to_adjacency_list(extra_arcs=[(1, 2)]) == [[1], [0, 2], [1]]
        assert graph.to_adjacency_list() == [[1], [0], []]


class TestDerivedProperties:

    def test_critical_path(self):
        graph = make_graph(6, [(0, 1), (1, 5), (2, 3)])
        assert graph.critical_path == [0, 1, 5]

    def test_critical_path_disconnected(self):
        graph = make_graph(4, [(0, 1)])
        assert graph.critical_path == []

    def test_critical_path_recomputed(self):
        graph = make_graph(6, [(0, 1), (1, 5)])
        graph.connect(0, 5)
        assert graph.critical_path == [0, 5]
        graph.disconnect(0, 5)
        assert graph.critical_path == [0, 1, 5]

    def test_complete_requires_own_arc_everywhere(self):
        graph = make_graph(3, [(0, 1), (1, 2)])
        assert not graph.is_complete
        graph.connect(2, 1)
        assert graph.is_complete

    def test_complete_requires_reachability(self):
        graph = make_graph(4, [(0, 3), (3, 0), (1, 2), (2, 1)])
        assert graph.critical_path == [0, 3]
        assert not graph.is_complete

    def test_single_room_is_not_complete(self):
        assert not make_graph(1).is_complete

    def test_planar_bound(self):
        k4 = [(i, j) for i in range(4) for j in range(i + 1, 4)]
        assert make_graph(4, k4).is_planar

        k5 = [(i, j) for i in range(5) for j in range(i + 1, 5)]
        assert not make_graph(5, k5).is_planar

    def test_planar_bound_not_applied_below_three_rooms(self):
        assert make_graph(2, [(0, 1)]).is_planar

    def test_single_room_counts_as_planar(self):
        """3 * 1 - 6 is negative, yet a lone room is trivially planar."""
        graph = make_graph(1)
        assert graph.undirected_edge_count() == 0
        assert graph.is_planar

    def test_nodes_instantiated(self):
        graph = make_graph(2)
        assert graph.node(0).values is None
        assert not graph.nodes_instantiated
        graph.node(0).values = [(1,)]
        graph.node(1).values = [(0,)]
        assert graph.nodes_instantiated
        graph.node(1).values.append((0,))
        assert not graph.nodes_instantiated

    def test_str_dump(self):
        graph = make_graph(3, [(0, 1), (1, 2)])
        text = str(graph)
        assert text.startswith("CP: [0, 1, 2]")
        assert "[0]: 1" in text.splitlines()
