"""
Utility Module
==============

NetworkX interop and diagnostics for space graphs.

Components:
    - to_networkx: Export rooms and arcs as a NetworkX DiGraph
    - validate_space_graph: Independent target validation
    - format_space_graph: Text dump of critical path, matrix and list
"""

from .graph_utils import format_space_graph, to_networkx, validate_space_graph

__all__ = [
    'format_space_graph',
    'to_networkx',
    'validate_space_graph',
]
