"""
Space Generator
===============

Facade driven by the Bayesian sampler. The sampler decides how many
rooms exist, how long the critical path is, and the per-room targets;
this module turns those decisions into a space graph.

Algorithm:
1. Create rooms 0..N-1 (0 = Entrance, N-1 = Goal)
2. Lay out the critical path Entrance -> ... -> Goal
3. Apply sampled targets (depth, CP distance, neighbour count)
4. Resolve the remaining connections via the CSP resolver

Output: SpaceGraph whose rooms own exactly max_neighbours arcs each
"""

import logging
import random
from typing import Dict, Mapping, Optional

from dungeon_topology.core.definitions import ENTRANCE_ID, NODE_FEATURE_ATTRIBUTES, FeatureType
from dungeon_topology.core.space_graph import NodeRef, SpaceGraph
from dungeon_topology.generation.resolver import ConstraintResolver, ResolverConfig
from dungeon_topology.utils.graph_utils import validate_space_graph
from dungeon_topology.validation.structural import valid_cp_length

logger = logging.getLogger(__name__)

Sample = Mapping[FeatureType, int]


class SpaceGenerator:
    """
    Builds space graphs from sampled structural targets.

    Usage:
        generator = SpaceGenerator(ResolverConfig(seed=1))
        graph = generator.create_graph(6)
        generator.critical_path_mapper(graph, 3)   # CP = [0, 1, 5]
        generator.assign_sample(graph, 2, {FeatureType.DEPTH: 3, ...})
        generator.neighbour_mapper(graph)
    """

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.config = config or ResolverConfig()
        self.resolver = ConstraintResolver(self.config)

    def create_graph(self, num_rooms: int) -> SpaceGraph:
        """Space graph with rooms 0..num_rooms-1 and no arcs."""
        if num_rooms < 1:
            raise ValueError(f"A dungeon needs at least one room, got {num_rooms}")
        graph = SpaceGraph()
        for room in range(num_rooms):
            graph.create_node(room)
        return graph

    def critical_path_mapper(self, graph: SpaceGraph, cp_length: int) -> SpaceGraph:
        """
        Lay out a critical path of cp_length rooms.

        The path runs Entrance, 1, 2, ..., cp_length-2, Goal. Every room on
        it is tagged with cp_distance 0 and its index as depth.
        """
        num_rooms = len(graph)
        lower = 1 if num_rooms == 1 else 2
        if not lower <= cp_length <= num_rooms:
            raise ValueError(
                f"Critical path length {cp_length} impossible with {num_rooms} rooms"
            )

        goal_id = graph.goal.id
        path = [ENTRANCE_ID] + list(range(1, cp_length - 1))
        if goal_id != ENTRANCE_ID:
            path.append(goal_id)

        for index, room in enumerate(path):
            node = graph.node(room)
            node.cp_distance = 0
            node.depth = index
        for parent, child in zip(path, path[1:]):
            graph.connect(parent, child)

        logger.info(f"Critical path mapped: {graph.critical_path}")
        return graph

    def assign_sample(self, graph: SpaceGraph, node_id: int, sample: Sample) -> None:
        """Apply a {FeatureType: value} sample to a room's targets."""
        node = graph.node(node_id)
        for feature, value in sample.items():
            if feature not in NODE_FEATURE_ATTRIBUTES:
                raise ValueError(f"{feature.name} is not a per-room feature")
            setattr(node, NODE_FEATURE_ATTRIBUTES[feature], value)

    def neighbour_mapper(
        self,
        graph: SpaceGraph,
        rng: Optional[random.Random] = None,
    ) -> SpaceGraph:
        """
        Connect the remaining rooms so every target is met.

        Raises:
            UnsatisfiableSampleError: If the targets cannot be realized
        """
        self.resolver.resolve(graph, rng=rng)

        is_valid, errors = validate_space_graph(graph)
        if not is_valid:
            logger.warning(f"Resolved graph fails topology validation: {errors}")
        return graph

    def generate(
        self,
        num_rooms: int,
        cp_length: int,
        samples: Dict[int, Sample],
        seed: Optional[int] = None,
    ) -> SpaceGraph:
        """
        Full pipeline: rooms, critical path, targets, connections.

        Args:
            num_rooms: Sampled room count
            cp_length: Sampled critical path length
            samples: Room id -> sampled targets
            seed: Seed for the tie-break among valid assignments
        """
        graph = self.create_graph(num_rooms)
        self.critical_path_mapper(graph, cp_length)
        for node_id, sample in samples.items():
            self.assign_sample(graph, node_id, sample)

        rng = random.Random(seed) if seed is not None else None
        return self.neighbour_mapper(graph, rng=rng)

    def valid_cp_length(self, graph: SpaceGraph, a: NodeRef, b: NodeRef) -> bool:
        return valid_cp_length(graph, a, b)
