"""
Validation Module
=================

Structural validators for candidate connections.

Components:
    - valid_cp_length / valid_planar_graph: graph-wide invariants
    - valid_neighbours_post_inc: per-room capacity
    - valid_cp_distance / valid_depth: per-room distance targets
    - try_connect: commit a connection only if every validator agrees
"""

from .structural import (
    closest_critical_room,
    cp_distances,
    trial_adjacency,
    try_connect,
    valid_connection,
    valid_cp_distance,
    valid_cp_length,
    valid_depth,
    valid_neighbours_post_inc,
    valid_planar_graph,
)

__all__ = [
    'closest_critical_room',
    'cp_distances',
    'trial_adjacency',
    'try_connect',
    'valid_connection',
    'valid_cp_distance',
    'valid_cp_length',
    'valid_depth',
    'valid_neighbours_post_inc',
    'valid_planar_graph',
]
