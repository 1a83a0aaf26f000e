"""
Orchestrator Package.

Single entrypoint for a liquid supply run: the sequential
pipeline and the command line that drives it.
"""

from .pipeline import PipelineResult, run

__all__ = ["PipelineResult", "run"]
