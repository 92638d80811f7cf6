"""Planning helpers that propose changes to a schedule."""

from capplanner.planning.fr_rotation import (
    CPSATRotationSolver,
    FirstResponderPlanner,
    HeuristicRotationSolver,
    RotationConfig,
    RotationProblem,
    RotationResult,
    SolverType,
    build_problem,
)

__all__ = [
    "FirstResponderPlanner",
    "RotationConfig",
    "RotationResult",
    "SolverType",
    # Solvers
    "CPSATRotationSolver",
    "HeuristicRotationSolver",
    "RotationProblem",
    "build_problem",
]
