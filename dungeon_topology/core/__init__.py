"""
Core Module - Space Graph Container
===================================

Definitions and the graph container for dungeon topology synthesis.

Components:
- definitions: Sampled feature names and graph constants
- space_graph: Node, Edge and SpaceGraph

Usage:
    from dungeon_topology.core import SpaceGraph, FeatureType

    graph = SpaceGraph()
    for room in range(6):
        graph.create_node(room)
    graph.connect(0, 1)
"""

from dungeon_topology.core.definitions import (
    FeatureType,
    NODE_FEATURE_ATTRIBUTES,
    ENTRANCE_ID,
    planar_edge_bound,
)
from dungeon_topology.core.space_graph import (
    Edge,
    Hypothesis,
    Node,
    SpaceGraph,
    room_id,
)

__all__ = [
    # Definitions
    'FeatureType',
    'NODE_FEATURE_ATTRIBUTES',
    'ENTRANCE_ID',
    'planar_edge_bound',
    # Container
    'Edge',
    'Hypothesis',
    'Node',
    'SpaceGraph',
    'room_id',
]
