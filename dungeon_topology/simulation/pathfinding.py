"""
Shortest-Path Engine
====================

Unit-weight Dijkstra over an adjacency list indexed by room id.

The frontier is a binary heap keyed by (hop count, insertion counter), so
rooms at equal cost are expanded in discovery order (first enqueued,
first served). The tie-break is stable, not adversarial: among several
shortest paths the one returned is whichever the neighbour ordering of
the adjacency list discovers first.

Every query takes a freshly built adjacency view. Rebuilding it is
O(V + E) per call, which is negligible for dungeon-sized graphs.

Usage:
    adjacency = graph.to_adjacency_list()
    path = shortest_path(adjacency, 0, 5)   # [0, 1, 5] or [] if unreachable
"""

import heapq
import logging
from collections import deque
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


def shortest_path(
    adjacency: Sequence[Sequence[int]],
    source: int,
    target: int,
) -> List[int]:
    """
    Find the shortest path between two rooms.

    Args:
        adjacency: adjacency[i] lists the neighbour ids of room i
        source: Start room id
        target: Goal room id

    Returns:
        Room ids from source to target inclusive, or an empty list if
        target cannot be reached. shortest_path(adj, a, a) == [a].

    Raises:
        KeyError: If source or target is not a room of the adjacency
    """
    num_nodes = len(adjacency)
    for node_id in (source, target):
        if not 0 <= node_id < num_nodes:
            raise KeyError(f"Room {node_id} does not exist (graph has {num_nodes} rooms)")

    frontier = [(0, 0, source)]
    counter = 0  # Tie-breaker for heap
    total_cost: Dict[int, int] = {source: 0}
    came_from: Dict[int, Optional[int]] = {source: None}

    while frontier:
        cost, _, current = heapq.heappop(frontier)
        if current == target:
            break
        if cost > total_cost[current]:
            continue  # Stale heap entry

        for neighbour in adjacency[current]:
            new_cost = cost + 1
            if neighbour not in total_cost or new_cost < total_cost[neighbour]:
                total_cost[neighbour] = new_cost
                came_from[neighbour] = current
                counter += 1
                heapq.heappush(frontier, (new_cost, counter, neighbour))

    if target not in came_from:
        return []

    # Work back from the target, then reverse
    path = []
    current: Optional[int] = target
    while current is not None:
        path.append(current)
        current = came_from[current]
    path.reverse()
    return path


def path_length(path: Sequence[int]) -> Optional[int]:
    """Hop count of a path, or None for an empty (unreachable) path."""
    if not path:
        return None
    return len(path) - 1


def bfs_distances(adjacency: Sequence[Sequence[int]], source: int) -> Dict[int, int]:
    """
    Compute hop distances from a room to every room it can reach.

    Equivalent to calling shortest_path once per target, in one sweep.

    Returns:
        Dict mapping reachable room id -> hop count (source maps to 0)
    """
    distances = {source: 0}
    queue = deque([source])

    while queue:
        current = queue.popleft()
        current_dist = distances[current]

        for neighbour in adjacency[current]:
            if neighbour not in distances:
                distances[neighbour] = current_dist + 1
                queue.append(neighbour)

    return distances
