"""
Constraint-Satisfaction Resolver
================================

Turns per-room structural targets into a concrete edge assignment.

Each room carries a domain: every candidate set of neighbours it could
end up owning arcs toward. Resolution walks each domain through

    Open       many hypotheses     reduce_potential_values()
    Singleton  one hypothesis      collapse_values()
    Committed  arcs realized       instantiate_graph()

and fails with UnsatisfiableSampleError when the sampled targets cannot
be realized. Retrying with a fresh sample is the caller's job.

Domain representation:
    A hypothesis is a sorted tuple of room ids. Domains only ever shrink;
    a hypothesis must contain every room its owner already has an arc to.

Usage:
    resolver = ConstraintResolver(ResolverConfig(seed=1))
    resolver.reduce_potential_values(graph)
    resolver.collapse_values(graph)
    resolver.instantiate_graph(graph)
"""

import itertools
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from dungeon_topology.core.space_graph import Hypothesis, SpaceGraph
from dungeon_topology.simulation.pathfinding import bfs_distances
from dungeon_topology.validation.structural import cp_distances, valid_neighbours_post_inc

logger = logging.getLogger(__name__)

Arc = Tuple[int, int]


# ============================================================================
# ERRORS
# ============================================================================

class TopologyError(RuntimeError):
    """Base class for failures while resolving a space graph."""


class PrematureInstantiationError(TopologyError, ValueError):
    """Instantiation requested while a domain still holds several hypotheses."""


class UnsatisfiableSampleError(TopologyError):
    """No dungeon satisfying the sampled targets can be produced."""


class DomainOverflowError(TopologyError):
    """A configured enumeration or search cap was exceeded."""


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class ResolverConfig:
    """Configuration for the constraint-satisfaction resolver."""
    max_hypotheses_per_node: Optional[int] = 250_000  # None = unbounded
    max_search_steps: Optional[int] = 1_000_000  # Safety limit for collapse
    check_child_capacity: bool = False  # Also require capacity on the child room
    require_complete: bool = True  # Collapse only accepts complete graphs
    seed: Optional[int] = None  # Tie-break among equally valid hypotheses


@dataclass
class ResolutionStats:
    """Diagnostics from the last resolution phases."""
    domain_sizes: Dict[int, int] = field(default_factory=dict)
    search_steps: int = 0
    committed_arcs: int = 0
    skipped_arcs: List[Arc] = field(default_factory=list)


# ============================================================================
# RESOLVER
# ============================================================================

class ConstraintResolver:
    """
    Reduces room domains and commits a consistent edge assignment.

    One resolver may be reused across graphs; its random stream carries
    on from call to call unless a generator is passed explicitly.
    """

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.config = config or ResolverConfig()
        self.rng = random.Random(self.config.seed)
        self.stats = ResolutionStats()

    # ------------------------------------------------------------------
    # Open: domain enumeration
    # ------------------------------------------------------------------

    def reduce_potential_values(self, graph: SpaceGraph) -> SpaceGraph:
        """
        Populate every room's domain with its candidate neighbour-sets.

        A candidate is any max_neighbours-sized set of other rooms that
        contains all rooms the owner already has arcs to. Rooms that
        already hold a domain are filtered, never re-enumerated; a domain
        that has emptied stays empty.

        Raises:
            ValueError: If a room has no max_neighbours target
            DomainOverflowError: If a domain would exceed the configured cap
        """
        self.stats.domain_sizes = {}
        all_ids = [node.id for node in graph.nodes]

        for node in graph.nodes:
            if node.max_neighbours is None:
                raise ValueError(f"Room {node.id} has no max_neighbours target")
            if node.max_neighbours < 0:
                raise ValueError(
                    f"Room {node.id} has a negative max_neighbours target ({node.max_neighbours})"
                )

            committed = set(node.children)
            if node.values is not None:
                node.values = [h for h in node.values if committed.issubset(h)]
            else:
                free = [room for room in all_ids if room != node.id and room not in committed]
                node.values = self._enumerate(node.id, free, committed, node.max_neighbours)

            self.stats.domain_sizes[node.id] = len(node.values)
            logger.debug(f"Room {node.id}: {len(node.values)} hypotheses (committed={sorted(committed)})")

        logger.info(f"Reduced domains: {self.stats.domain_sizes}")
        return graph

    def _enumerate(
        self,
        node_id: int,
        free: Sequence[int],
        committed: set,
        size: int,
    ) -> List[Hypothesis]:
        """Every size-`size` superset of `committed` drawn from committed + free."""
        remaining = size - len(committed)
        if remaining < 0:
            return []

        count = math.comb(len(free), remaining)
        cap = self.config.max_hypotheses_per_node
        if cap is not None and count > cap:
            raise DomainOverflowError(
                f"Room {node_id} would enumerate {count} hypotheses (cap {cap})"
            )

        domain = [
            tuple(sorted(committed.union(combination)))
            for combination in itertools.combinations(free, remaining)
        ]
        domain.sort()
        return domain

    # ------------------------------------------------------------------
    # Singleton: domain collapse
    # ------------------------------------------------------------------

    def collapse_values(
        self,
        graph: SpaceGraph,
        rng: Optional[random.Random] = None,
        cp_length: Optional[int] = None,
    ) -> SpaceGraph:
        """
        Collapse every domain to the single hypothesis of a valid assignment.

        Backtracking search over rooms in id order. Candidate order is
        shuffled by `rng`, so the same seed always yields the same
        topology. Adding arcs can only shorten distances, which lets
        partial assignments be pruned as soon as a distance undershoots
        its target.

        Args:
            graph: Space graph with reduced domains
            rng: Random generator for the tie-break (defaults to the
                resolver's own seeded stream)
            cp_length: Critical path room count to preserve (defaults to
                the current critical path, if any)

        Raises:
            ValueError: If a room has not been reduced yet
            UnsatisfiableSampleError: If some domain is empty or no
                assignment meets every target
            DomainOverflowError: If the search exceeds max_search_steps
        """
        rng = rng or self.rng
        nodes = graph.nodes

        unreduced = [node.id for node in nodes if node.values is None]
        if unreduced:
            raise ValueError(f"Rooms {unreduced} have no domain yet, reduce first")
        empty = [node.id for node in nodes if not node.values]
        if empty:
            raise UnsatisfiableSampleError(f"Rooms {empty} have no candidate neighbour-sets left")

        if cp_length is None:
            cp_length = len(graph.critical_path) or None

        candidates: Dict[int, List[Hypothesis]] = {}
        for node in nodes:
            ordered = list(node.values)
            rng.shuffle(ordered)
            candidates[node.id] = ordered

        chosen: Dict[int, Hypothesis] = {}
        self.stats.search_steps = 0
        step_cap = self.config.max_search_steps

        def search(index: int) -> bool:
            if index == len(nodes):
                return self._satisfies_targets(graph, chosen, cp_length)

            node = nodes[index]
            for hypothesis in candidates[node.id]:
                self.stats.search_steps += 1
                if step_cap is not None and self.stats.search_steps > step_cap:
                    raise DomainOverflowError(f"Collapse exceeded {step_cap} search steps")

                chosen[node.id] = hypothesis
                if self._feasible(graph, chosen, cp_length) and search(index + 1):
                    return True
                del chosen[node.id]
            return False

        if not search(0):
            raise UnsatisfiableSampleError(
                "No neighbour assignment satisfies the sampled targets"
            )

        for node in nodes:
            node.values = [chosen[node.id]]

        assignment = {node_id: list(hypothesis) for node_id, hypothesis in chosen.items()}
        logger.info(
            f"Collapsed {len(nodes)} domains in {self.stats.search_steps} steps: {assignment}"
        )
        return graph

    @staticmethod
    def _hypothesis_arcs(chosen: Dict[int, Hypothesis]) -> List[Arc]:
        return [(node_id, child) for node_id, hypothesis in chosen.items() for child in hypothesis]

    def _feasible(
        self,
        graph: SpaceGraph,
        chosen: Dict[int, Hypothesis],
        cp_length: Optional[int],
    ) -> bool:
        """Monotone checks that no later arc could repair."""
        arcs = self._hypothesis_arcs(chosen)
        if not graph.within_planar_bound(extra_arcs=arcs):
            return False

        adjacency = graph.to_adjacency_list(extra_arcs=arcs)
        critical_path = graph.critical_path_for(adjacency)
        if cp_length is not None and critical_path and len(critical_path) < cp_length:
            return False

        depths = bfs_distances(adjacency, graph.entrance.id)
        for node in graph.nodes:
            if node.depth is not None and node.id in depths and depths[node.id] < node.depth:
                return False
        return True

    def _satisfies_targets(
        self,
        graph: SpaceGraph,
        chosen: Dict[int, Hypothesis],
        cp_length: Optional[int],
    ) -> bool:
        """Full check of a complete assignment."""
        arcs = self._hypothesis_arcs(chosen)
        if not graph.within_planar_bound(extra_arcs=arcs):
            return False

        adjacency = graph.to_adjacency_list(extra_arcs=arcs)
        critical_path = graph.critical_path_for(adjacency)
        if cp_length is not None and len(critical_path) != cp_length:
            return False

        depths = bfs_distances(adjacency, graph.entrance.id)
        nearest = cp_distances(adjacency, critical_path)
        for node in graph.nodes:
            if node.depth is not None and depths.get(node.id) != node.depth:
                return False
            if node.cp_distance is not None and nearest.get(node.id) != node.cp_distance:
                return False

        if self.config.require_complete:
            if not critical_path or len(depths) != len(graph):
                return False
            if any(not node.edges and not chosen[node.id] for node in graph.nodes):
                return False
        return True

    # ------------------------------------------------------------------
    # Committed: instantiation
    # ------------------------------------------------------------------

    def instantiate_graph(self, graph: SpaceGraph) -> SpaceGraph:
        """
        Commit each room's single hypothesis as arcs.

        Capacity is checked live while rooms are processed in id order, so
        the order decides which arcs are committed when capacity runs out.
        Afterwards every room must own exactly max_neighbours arcs. On
        failure the arcs committed by this call are removed again.

        Raises:
            PrematureInstantiationError: If a domain still holds several
                hypotheses
            UnsatisfiableSampleError: If a domain is empty or a room ends
                with the wrong number of arcs
        """
        empty = [node.id for node in graph.nodes if node.values is not None and not node.values]
        if empty:
            raise UnsatisfiableSampleError(f"Rooms {empty} have no candidate neighbour-sets left")
        if not graph.nodes_instantiated:
            raise PrematureInstantiationError("Cannot create a graph from non-singleton values.")

        self.stats.committed_arcs = 0
        self.stats.skipped_arcs = []
        committed: List[Arc] = []

        for parent in graph.nodes:
            for child_id in parent.values[0]:
                if parent.has_edge_to(child_id):
                    continue
                child = graph.node(child_id)
                has_capacity = valid_neighbours_post_inc(parent)
                if has_capacity and self.config.check_child_capacity:
                    has_capacity = valid_neighbours_post_inc(child)

                if not has_capacity:
                    logger.debug(f"Skipping arc {parent.id} -> {child_id}: capacity reached")
                    self.stats.skipped_arcs.append((parent.id, child_id))
                    continue

                graph.connect(parent.id, child_id)
                committed.append((parent.id, child_id))
                self.stats.committed_arcs += 1

        mismatched = {
            node.id: (node.own_degree, node.max_neighbours)
            for node in graph.nodes
            if node.own_degree != node.max_neighbours
        }
        if mismatched:
            logger.warning(f"Rejected sample, (arcs, target) per room: {mismatched}")
            for parent_id, child_id in committed:
                graph.disconnect(parent_id, child_id)
            self.stats.committed_arcs = 0
            raise UnsatisfiableSampleError("No dungeon that satisfies these samples can be produced.")

        logger.info(f"Instantiated graph with {self.stats.committed_arcs} new arcs")
        return graph

    def resolve(self, graph: SpaceGraph, rng: Optional[random.Random] = None) -> SpaceGraph:
        """Reduce, collapse and instantiate in one call."""
        self.reduce_potential_values(graph)
        self.collapse_values(graph, rng=rng)
        return self.instantiate_graph(graph)
