"""Post-run analysis of replica convergence."""

from convergent.analysis.trace import ConvergenceTrace, TraceSample

__all__ = [
    "ConvergenceTrace",
    "TraceSample",
]
