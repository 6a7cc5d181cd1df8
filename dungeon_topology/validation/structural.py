"""
Structural Validators
=====================

Predicates deciding whether a candidate connection A -> B preserves the
structural targets of the space graph.

Each validator evaluates the graph *as if* the arc were committed: the
arc is overlaid on a snapshot of the adjacency instead of being
connected and rolled back, so the committed edge set is never touched
and validation is safe to interleave with other reads.

Validators:
    valid_cp_length           critical path keeps its length
    valid_planar_graph        planarity bound still holds
    valid_neighbours_post_inc room is still under its neighbour cap
    valid_cp_distance         both endpoints keep their CP distance target
    valid_depth               both endpoints keep their depth target

Targets left as None by the sampler are unconstrained.

Usage:
    if valid_cp_length(graph, a, b) and valid_depth(graph, a, b):
        graph.connect(a, b)
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from dungeon_topology.core.space_graph import Node, NodeRef, SpaceGraph, room_id
from dungeon_topology.simulation.pathfinding import bfs_distances, path_length, shortest_path

logger = logging.getLogger(__name__)


def trial_adjacency(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> List[List[int]]:
    """Mirrored adjacency with the arc A -> B overlaid."""
    arc = (_resolve(graph, a).id, _resolve(graph, b).id)
    return graph.to_adjacency_list(extra_arcs=[arc])


def closest_critical_room(
    adjacency: Sequence[Sequence[int]],
    critical_path: Sequence[int],
    node_id: int,
) -> Optional[Tuple[int, int]]:
    """
    Nearest critical path room to node_id.

    Ties go to the room appearing first along the critical path.

    Returns:
        (critical room id, hop distance), or None if no critical room is
        reachable
    """
    distances = bfs_distances(adjacency, node_id)
    reachable = [room for room in critical_path if room in distances]
    if not reachable:
        return None
    closest = min(reachable, key=lambda room: distances[room])
    return closest, distances[closest]


def cp_distances(
    adjacency: Sequence[Sequence[int]],
    critical_path: Sequence[int],
) -> Dict[int, int]:
    """Hop distance from every reachable room to the nearest critical room."""
    if not critical_path:
        return {}
    # Multi-source sweep from the whole critical path
    result: Dict[int, int] = {}
    for room in critical_path:
        for node_id, dist in bfs_distances(adjacency, room).items():
            if node_id not in result or dist < result[node_id]:
                result[node_id] = dist
    return result


def valid_cp_length(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """
    Validate that adding A -> B does not change the critical path length.

    Args:
        graph: Space graph
        a: Parent room
        b: Child room

    Returns:
        True if the critical path keeps its room count
    """
    original_length = len(graph.critical_path)
    trial = trial_adjacency(graph, a, b)
    is_valid = len(graph.critical_path_for(trial)) == original_length
    logger.debug(f"valid_cp_length({room_id(a)}, {room_id(b)}) = {is_valid}")
    return is_valid


def valid_planar_graph(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """Validate that the planarity bound still holds with A -> B added."""
    arc = (_resolve(graph, a).id, _resolve(graph, b).id)
    return graph.within_planar_bound(extra_arcs=[arc])


def valid_neighbours_post_inc(node: Node) -> bool:
    """
    Validate that a room is still strictly under its neighbour cap.

    Meant to be asked once the room's arc count already reflects the
    connection in question. A room without a cap has no capacity.
    """
    if node.max_neighbours is None:
        return False
    return node.own_degree < node.max_neighbours


def valid_cp_distance(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """
    Validate that A and B keep their distance to the critical path.

    With A -> B overlaid, each endpoint's nearest critical room must lie
    exactly cp_distance hops away.
    """
    node_a, node_b = _resolve(graph, a), _resolve(graph, b)
    trial = trial_adjacency(graph, node_a, node_b)
    critical_path = graph.critical_path_for(trial)

    def endpoint_valid(node: Node) -> bool:
        if node.cp_distance is None:
            return True
        closest = closest_critical_room(trial, critical_path, node.id)
        if closest is None:
            return False
        return node.cp_distance == closest[1]

    is_valid = endpoint_valid(node_a) and endpoint_valid(node_b)
    logger.debug(f"valid_cp_distance({node_a.id}, {node_b.id}) = {is_valid}")
    return is_valid


def valid_depth(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """
    Validate that A and B keep their distance from the Entrance.

    Both targets are compared against A's distance to the Entrance;
    B's own distance is not consulted.
    """
    node_a, node_b = _resolve(graph, a), _resolve(graph, b)
    trial = trial_adjacency(graph, node_a, node_b)
    depth_a = path_length(shortest_path(trial, node_a.id, graph.entrance.id))

    is_a_valid = node_a.depth is None or node_a.depth == depth_a
    is_b_valid = node_b.depth is None or node_b.depth == depth_a
    return is_a_valid and is_b_valid


def valid_connection(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """All graph-level validators plus capacity of the parent room."""
    node_a, node_b = _resolve(graph, a), _resolve(graph, b)
    if node_a.id == node_b.id:
        return False
    if not valid_neighbours_post_inc(node_a):
        return False
    return (
        valid_cp_length(graph, node_a, node_b)
        and valid_planar_graph(graph, node_a, node_b)
        and valid_cp_distance(graph, node_a, node_b)
        and valid_depth(graph, node_a, node_b)
    )


def try_connect(graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
    """
    Commit A -> B only if valid_connection accepts it.

    Returns:
        True if the arc was committed
    """
    if not valid_connection(graph, a, b):
        logger.debug(f"Rejected connection {room_id(a)} -> {room_id(b)}")
        return False
    graph.connect(a, b)
    return True


def _resolve(graph: SpaceGraph, ref: NodeRef) -> Node:
    return graph.node(room_id(ref))