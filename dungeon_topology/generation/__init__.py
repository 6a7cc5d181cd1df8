"""
Generation Module
=================

Constraint-satisfaction resolution of space graphs.

Components:
    - ConstraintResolver: reduce -> collapse -> instantiate
    - SpaceGenerator: facade driven by the Bayesian sampler
"""

from .resolver import (
    ConstraintResolver,
    DomainOverflowError,
    PrematureInstantiationError,
    ResolutionStats,
    ResolverConfig,
    TopologyError,
    UnsatisfiableSampleError,
)
from .space_generator import SpaceGenerator

__all__ = [
    'ConstraintResolver',
    'DomainOverflowError',
    'PrematureInstantiationError',
    'ResolutionStats',
    'ResolverConfig',
    'SpaceGenerator',
    'TopologyError',
    'UnsatisfiableSampleError',
]
