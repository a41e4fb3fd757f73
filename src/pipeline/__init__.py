"""Digest pipeline orchestration.

Composes collectors, the accumulation store, the ranker, enrichment and
renderers into the collect and generate runs.
"""

from src.pipeline.errors import PipelineError, PipelineStateError, PreconditionError
from src.pipeline.models import CollectSummary, GenerateMode, GenerateSummary
from src.pipeline.orchestrator import DigestPipeline, parse_generate_mode
from src.pipeline.state_machine import PipelineState, PipelineStateMachine


__all__ = [
    # Errors
    "PipelineError",
    "PipelineStateError",
    "PreconditionError",
    # Models
    "CollectSummary",
    "GenerateMode",
    "GenerateSummary",
    # Orchestration
    "DigestPipeline",
    "PipelineState",
    "PipelineStateMachine",
    "parse_generate_mode",
]
