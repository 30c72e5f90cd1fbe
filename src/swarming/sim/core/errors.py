"""Swarm exception hierarchy.

Construction problems surface as ``ConfigurationError`` before any tick can
observe a bad entity; problems found while stepping surface as
``SimulationError`` subclasses and stop the run.
"""


class SwarmError(Exception):
    """Root of all swarm simulation exceptions."""


class ConfigurationError(SwarmError, ValueError):
    """Invalid configuration value or entity parameter."""


class SimulationError(SwarmError):
    """Errors raised while advancing the simulation."""


class InvariantViolationError(SimulationError):
    """Post-tick state broke an invariant (non-unit heading, NaN, out of arena)."""
