"""
SPACE GRAPH DEFINITIONS
=======================
Central constants and type definitions for the space graph.

This file is the SINGLE SOURCE OF TRUTH for:
- Sampled feature names
- Entrance identity
- Planarity bound coefficients

"""

from enum import Enum
from typing import Dict


# ==========================================
# SAMPLED FEATURES
# ==========================================
# Random variables of the Bayesian network that drives generation.
# The sampler decides their values; the space graph only consumes them.

class FeatureType(Enum):
    """Names of the sampled parameters (one node each in the DAG)."""
    NUM_ROOMS = "num_rooms"
    CRITICAL_PATH_LENGTH = "critical_path_length"
    DEPTH = "depth"
    CRITICAL_PATH_DISTANCE = "critical_path_distance"
    NUM_NEIGHBOURS = "num_neighbours"


# Per-room features and the Node attribute each one targets
NODE_FEATURE_ATTRIBUTES: Dict[FeatureType, str] = {
    FeatureType.DEPTH: 'depth',
    FeatureType.CRITICAL_PATH_DISTANCE: 'cp_distance',
    FeatureType.NUM_NEIGHBOURS: 'max_neighbours',
}


# ==========================================
# GRAPH CONSTANTS
# ==========================================

ENTRANCE_ID = 0  # Goal is always the maximum id

# Euler: edges <= 3 * vertices - 6 for simple planar graphs with >= 3 vertices
PLANAR_EDGE_FACTOR = 3
PLANAR_EDGE_OFFSET = 6
PLANAR_MIN_NODES = 3


def planar_edge_bound(num_nodes: int) -> int:
    """Maximum undirected edge count allowed by the planarity bound."""
    return PLANAR_EDGE_FACTOR * num_nodes - PLANAR_EDGE_OFFSET
