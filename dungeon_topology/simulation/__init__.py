"""
Simulation Module
=================

Traversal over the mirrored (undirected) adjacency of a space graph.

Components:
    - shortest_path: Unit-weight Dijkstra with stable tie-breaking
    - bfs_distances: Hop distances from one room to every reachable room
"""

from .pathfinding import shortest_path, bfs_distances, path_length

__all__ = ['shortest_path', 'bfs_distances', 'path_length']
