"""
Dungeon Topology Package - Space Graph Synthesis
================================================

Synthesizes the room/connection topology of a dungeon from per-room
structural targets produced by an external Bayesian sampler.

Submodules:
- core: Definitions and the SpaceGraph container
- simulation: Shortest-path engine
- validation: Structural validators for candidate edges
- generation: Constraint-satisfaction resolver and generator facade
- utils: NetworkX interop and diagnostics

Pipeline:
    Step 1: SpaceGenerator.create_graph - rooms 0..N-1
    Step 2: SpaceGenerator.critical_path_mapper - Entrance -> Goal spine
    Step 3: SpaceGenerator.assign_sample - per-room targets
    Step 4: ConstraintResolver - reduce, collapse, instantiate
"""

__version__ = "1.0.0"

__all__ = ['core', 'simulation', 'validation', 'generation', 'utils']
