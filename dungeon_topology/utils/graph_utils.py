"""
Space Graph Utilities
=====================

Interop and diagnostics for resolved space graphs.

This module provides:
- NetworkX export (rooms with their targets, arcs as directed edges)
- Independent validation of a resolved graph against its targets
- Textual adjacency dump for debugging

Usage:
    from dungeon_topology.utils.graph_utils import to_networkx, validate_space_graph

    G = to_networkx(graph)
    is_valid, errors = validate_space_graph(graph)
    if not is_valid:
        print(f"Validation failed: {errors}")
"""

import logging
from typing import TYPE_CHECKING, List, Tuple

import networkx as nx

if TYPE_CHECKING:
    from dungeon_topology.core.space_graph import SpaceGraph

logger = logging.getLogger(__name__)


# ==========================================
# NETWORKX EXPORT
# ==========================================

def to_networkx(graph: "SpaceGraph") -> nx.DiGraph:
    """
    Convert a SpaceGraph to a NetworkX DiGraph.

    Each arc keeps its owner as the edge source. Use G.to_undirected()
    for the traversal view.

    Node attributes: max_neighbours, depth, cp_distance, on_critical_path,
    is_entrance, is_goal.
    """
    G = nx.DiGraph()
    if len(graph) == 0:
        return G

    critical_path = set(graph.critical_path)
    entrance_id, goal_id = graph.entrance.id, graph.goal.id

    for node in graph.nodes:
        G.add_node(
            node.id,
            max_neighbours=node.max_neighbours,
            depth=node.depth,
            cp_distance=node.cp_distance,
            on_critical_path=node.id in critical_path,
            is_entrance=node.id == entrance_id,
            is_goal=node.id == goal_id,
        )

    for edge in graph.edges:
        G.add_edge(edge.parent, edge.child)

    return G


# ==========================================
# VALIDATION
# ==========================================

def validate_space_graph(graph: "SpaceGraph") -> Tuple[bool, List[str]]:
    """
    Check a resolved graph against every assigned target.

    Distances are recomputed with NetworkX, independently of the
    shortest-path engine used during resolution.

    Checks:
    - Graph is connected and every room owns at least one arc
    - Each room owns exactly max_neighbours arcs (when assigned)
    - Depth and CP distance targets hold (when assigned)
    - Planarity bound holds

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    if len(graph) == 0:
        errors.append("Graph is empty (no rooms)")
        return False, errors

    G = to_networkx(graph).to_undirected()

    if not nx.is_connected(G):
        errors.append("Graph is not connected (has isolated components)")

    for node in graph.nodes:
        if not node.edges:
            errors.append(f"Room {node.id} owns no arcs")
        if node.max_neighbours is not None and node.own_degree != node.max_neighbours:
            errors.append(
                f"Room {node.id} owns {node.own_degree} arcs, target is {node.max_neighbours}"
            )

    depths = nx.single_source_shortest_path_length(G, graph.entrance.id)
    critical_path = graph.critical_path
    if critical_path:
        cp_distances = nx.multi_source_dijkstra_path_length(G, set(critical_path))
    else:
        errors.append("No path from Entrance to Goal")
        cp_distances = {}

    for node in graph.nodes:
        if node.depth is not None and depths.get(node.id) != node.depth:
            errors.append(
                f"Room {node.id} is {depths.get(node.id)} hops from the Entrance, "
                f"target is {node.depth}"
            )
        if node.cp_distance is not None and cp_distances.get(node.id) != node.cp_distance:
            errors.append(
                f"Room {node.id} is {cp_distances.get(node.id)} hops from the critical path, "
                f"target is {node.cp_distance}"
            )

    if not graph.is_planar:
        errors.append(
            f"{graph.undirected_edge_count()} edges exceed the planarity bound for {len(graph)} rooms"
        )

    is_valid = len(errors) == 0
    if not is_valid:
        logger.debug(f"Space graph validation errors: {errors}")
    return is_valid, errors


# ==========================================
# TEXT DUMP
# ==========================================

def format_space_graph(graph: "SpaceGraph") -> str:
    """
    Render critical path, adjacency matrix and directed adjacency list.

    Matrix cells: '&' on the diagonal, '1' for an own arc, '.' otherwise.
    """
    matrix = graph.to_adjacency_matrix()
    count = len(graph)
    lines = [f"CP: [{', '.join(str(room) for room in graph.critical_path)}]"]

    header = ' ' * 8 + ''.join(
        f"{i}{' ' if i >= 10 else '  '}" for i in range(count)
    )
    lines.append(header)

    for i in range(count):
        cells = []
        for j in range(count):
            if i == j:
                cells.append(' &,')
            elif matrix[i, j]:
                cells.append(f" {matrix[i, j]},")
            else:
                cells.append(' .,')
        lines.append(f"{i}{' ' if i >= 10 else '  '}| [ {''.join(cells)} ]")

    lines.append('')
    for i, neighbours in enumerate(graph.to_adjacency_list(undirected=False)):
        lines.append(f"[{i}]: {' '.join(str(n) for n in neighbours)}")

    return '\n'.join(lines)
