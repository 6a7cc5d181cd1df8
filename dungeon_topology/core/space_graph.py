"""
Space Graph: Dungeon Topology Container
========================================

Rooms are nodes, connections are edges. Each room owns the arcs it
created (parent -> child); every traversal query mirrors those arcs into
both endpoints, so the topology behaves as undirected while capacity
bookkeeping stays per room:

    graph.connect(0, 1)
    graph.node(0).own_degree   # 1
    graph.node(1).own_degree   # 0  (room 1 holds no arc of its own)
    graph.path_to(1, 0)        # [1, 0]

Conventions:
    - Room ids are dense and 0-based (precondition of create_node)
    - Entrance is room 0, Goal is the room with the maximum id
    - Critical path is the shortest Entrance -> Goal path, recomputed on
      every access because edges change continually during resolution

Derived properties:
    - critical_path: shortest path Entrance -> Goal (empty if disconnected)
    - is_complete: critical path exists, every room owns an arc, and
      every room is reachable from the Entrance
    - is_planar: Euler bound edges <= 3 * rooms - 6 (necessary only)
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from dungeon_topology.core.definitions import (
    ENTRANCE_ID,
    PLANAR_MIN_NODES,
    planar_edge_bound,
)
from dungeon_topology.simulation.pathfinding import bfs_distances, shortest_path

logger = logging.getLogger(__name__)

# A candidate neighbour-set: sorted tuple of room ids
Hypothesis = Tuple[int, ...]
NodeRef = Union[int, "Node"]


# ============================================================================
# GRAPH DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True)
class Edge:
    """Directed arc owned by its parent room."""
    parent: int
    child: int


@dataclass
class Node:
    """Room in the space graph with its sampled structural targets."""
    id: int
    edges: List[Edge] = field(default_factory=list)

    # Candidate neighbour-sets, shrinking during resolution (None = not yet reduced)
    values: Optional[List[Hypothesis]] = None

    # Targets assigned by the sampler
    max_neighbours: Optional[int] = None  # Required before resolution
    depth: Optional[int] = None  # Hops from the Entrance
    cp_distance: Optional[int] = None  # Hops from the nearest critical path room

    @property
    def children(self) -> List[int]:
        """Ids this room holds arcs toward, in creation order."""
        return [edge.child for edge in self.edges]

    @property
    def own_degree(self) -> int:
        return len(self.edges)

    def has_edge_to(self, child_id: int) -> bool:
        return any(edge.child == child_id for edge in self.edges)

    def add_edge(self, child_id: int) -> bool:
        """Add an arc toward child_id. Returns False if it already exists."""
        if self.has_edge_to(child_id):
            return False
        self.edges.append(Edge(parent=self.id, child=child_id))
        return True

    def remove_edge(self, child_id: int) -> bool:
        """Remove the arc toward child_id. Returns False if there is none."""
        for i, edge in enumerate(self.edges):
            if edge.child == child_id:
                del self.edges[i]
                return True
        return False


class SpaceGraph:
    """
    Container for rooms and their arcs.

    Rooms are indexed by id for O(1) lookup. Arcs are stored once, on the
    room that created them; to_adjacency_list() mirrors them for
    traversal.

    Not reentrant: one writer per instance. Readers that run while a
    caller is mid-way through a connect/disconnect pair see the transient
    arc.
    """

    def __init__(self):
        self._nodes: Dict[int, Node] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def create_node(self, node_id: int) -> Node:
        """
        Create and register a room.

        Precondition: ids are assigned densely from 0 by the caller.
        """
        if node_id in self._nodes:
            raise ValueError(f"Room {node_id} already exists")
        node = Node(id=node_id)
        self._nodes[node_id] = node
        return node

    def node(self, node_id: int) -> Node:
        """Look up a room by id."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Room {node_id} does not exist") from None

    def connect(self, parent: NodeRef, child: NodeRef) -> None:
        """Add the arc parent -> child to parent's own edges."""
        parent_id, child_id = room_id(parent), room_id(child)
        if parent_id == child_id:
            logger.debug(f"Parent and child are the same room [{parent_id}]. Skipping...")
            return
        child_node = self.node(child_id)
        self.node(parent_id).add_edge(child_node.id)

    def disconnect(self, parent: NodeRef, child: NodeRef) -> None:
        """Remove the arc parent -> child if present."""
        parent_id, child_id = room_id(parent), room_id(child)
        self.node(parent_id).remove_edge(child_id)

    def copy(self) -> "SpaceGraph":
        """Independent deep copy (rooms, arcs, domains and targets)."""
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> List[Node]:
        """Rooms ordered by id."""
        return [self._nodes[node_id] for node_id in sorted(self._nodes)]

    @property
    def edges(self) -> List[Edge]:
        """Every own arc of every room."""
        return [edge for node in self.nodes for edge in node.edges]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._nodes

    @property
    def entrance(self) -> Node:
        return self.node(ENTRANCE_ID)

    @property
    def goal(self) -> Node:
        return self.node(max(self._nodes))

    def to_adjacency_matrix(self, extra_arcs: Iterable[Tuple[int, int]] = ()) -> np.ndarray:
        """
        Presence grid of own arcs: matrix[i, j] == 1 iff room i owns i -> j.

        Args:
            extra_arcs: Hypothetical (parent, child) arcs to overlay without
                touching the committed edges
        """
        size = len(self._nodes)
        matrix = np.zeros((size, size), dtype=np.uint8)
        for edge in self.edges:
            matrix[edge.parent, edge.child] = 1
        for parent, child in extra_arcs:
            if parent != child:
                matrix[parent, child] = 1
        return matrix

    def to_adjacency_list(
        self,
        undirected: bool = True,
        extra_arcs: Iterable[Tuple[int, int]] = (),
    ) -> List[List[int]]:
        """
        Neighbour ids per room, in ascending id order.

        With undirected=True every arc is mirrored into both endpoints;
        this is the view all traversal uses.
        """
        matrix = self.to_adjacency_matrix(extra_arcs)
        if undirected:
            matrix = matrix | matrix.T
        return [np.flatnonzero(row).tolist() for row in matrix]

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    def path_to(self, source: int, target: int) -> List[int]:
        """Shortest path between two rooms ([] if unreachable)."""
        return shortest_path(self.to_adjacency_list(), source, target)

    def critical_path_for(self, adjacency: Sequence[Sequence[int]]) -> List[int]:
        """Critical path over an explicit adjacency view."""
        if not self._nodes:
            return []
        return shortest_path(adjacency, self.entrance.id, self.goal.id)

    @property
    def critical_path(self) -> List[int]:
        return self.critical_path_for(self.to_adjacency_list())

    def undirected_edge_count(self, extra_arcs: Iterable[Tuple[int, int]] = ()) -> int:
        """Number of distinct room pairs joined by at least one arc."""
        pairs: Set[Tuple[int, int]] = set()
        for edge in self.edges:
            pairs.add((min(edge.parent, edge.child), max(edge.parent, edge.child)))
        for parent, child in extra_arcs:
            if parent != child:
                pairs.add((min(parent, child), max(parent, child)))
        return len(pairs)

    def within_planar_bound(self, extra_arcs: Iterable[Tuple[int, int]] = ()) -> bool:
        """Euler bound check, optionally with hypothetical arcs overlaid."""
        num_nodes = len(self._nodes)
        if num_nodes < PLANAR_MIN_NODES:
            return True
        return self.undirected_edge_count(extra_arcs) <= planar_edge_bound(num_nodes)

    @property
    def is_planar(self) -> bool:
        """
        Necessary-but-not-sufficient planarity filter.

        Only the edge-count bound is checked; no embedding is attempted.
        Graphs with fewer than three rooms always count as planar, which
        departs on purpose from the literal edges <= 3 * rooms - 6 bound:
        that bound is negative there, yet every such graph is planar.
        """
        return self.within_planar_bound()

    @property
    def is_complete(self) -> bool:
        """Critical path exists, every room owns an arc, all rooms reachable."""
        return self._validate_nodes_connected() and self._validate_reachability()

    @property
    def nodes_instantiated(self) -> bool:
        """True when every room's domain holds exactly one hypothesis."""
        return all(
            node.values is not None and len(node.values) == 1 for node in self._nodes.values()
        )

    def _validate_nodes_connected(self) -> bool:
        critical_path = self.critical_path
        logger.debug(f"Critical path: {critical_path}")
        if not critical_path:
            return False
        return all(node.edges for node in self._nodes.values())

    def _validate_reachability(self) -> bool:
        """False on the first room unreachable from the Entrance."""
        reachable = bfs_distances(self.to_adjacency_list(), self.entrance.id)
        for node_id in self._nodes:
            if node_id not in reachable:
                logger.debug(f"FAILED GRAPH VALIDATION: Non-reachable room {node_id} detected")
                return False
        return True

    def __str__(self) -> str:
        from dungeon_topology.utils.graph_utils import format_space_graph
        return format_space_graph(self)

    def __repr__(self) -> str:
        return f"SpaceGraph(rooms={len(self._nodes)}, arcs={len(self.edges)})"


def room_id(ref: NodeRef) -> int:
    """Room id of a Node or a bare id."""
    return ref.id if isinstance(ref, Node) else ref
