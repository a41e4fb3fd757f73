"""Phase tracking for a digest run."""

from enum import Enum

import structlog

from src.pipeline.errors import PipelineStateError


logger = structlog.get_logger()


class PipelineState(str, Enum):
    """Phase reached by a run.

    Phases are strictly ordered:
    - STARTED: Nothing done yet
    - FETCHED: Every enabled feed has been collected
    - MERGED: Fresh items were written into the daily pools
    - LOADED: Candidate pools were read back
    - RANKED: Skip sets applied and top-N selected
    - ENRICHED: Ranked items carry supplements and article text
    - PUBLISHED: Outputs written and ids marked in the ledger
    - FAILED: The run stopped with an error
    """

    STARTED = "STARTED"
    FETCHED = "FETCHED"
    MERGED = "MERGED"
    LOADED = "LOADED"
    RANKED = "RANKED"
    ENRICHED = "ENRICHED"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"


_VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    # generate without --fetch goes straight to LOADED
    PipelineState.STARTED: {
        PipelineState.FETCHED,
        PipelineState.LOADED,
        PipelineState.FAILED,
    },
    PipelineState.FETCHED: {PipelineState.MERGED, PipelineState.FAILED},
    PipelineState.MERGED: {PipelineState.LOADED, PipelineState.FAILED},
    PipelineState.LOADED: {PipelineState.RANKED, PipelineState.FAILED},
    PipelineState.RANKED: {PipelineState.ENRICHED, PipelineState.FAILED},
    PipelineState.ENRICHED: {PipelineState.PUBLISHED, PipelineState.FAILED},
    PipelineState.PUBLISHED: set(),
    PipelineState.FAILED: set(),
}


class PipelineStateMachine:
    """Enforces phase order for one run and logs each step."""

    def __init__(self, run_id: str) -> None:
        self._run_id = run_id
        self._state = PipelineState.STARTED
        self._log = logger.bind(component="pipeline", run_id=run_id)

    @property
    def state(self) -> PipelineState:
        """Get the current phase."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if the run has finished or failed."""
        return self._state in (PipelineState.PUBLISHED, PipelineState.FAILED)

    def can_transition_to(self, target: PipelineState) -> bool:
        """Check if moving to ``target`` is allowed from the current phase."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: PipelineState) -> None:
        """Move to a new phase.

        Args:
            target: The next phase.

        Raises:
            PipelineStateError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise PipelineStateError(self._run_id, self._state.value, target.value)

        old_state = self._state
        self._state = target
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_fetched(self) -> None:
        """Transition to FETCHED."""
        self.transition_to(PipelineState.FETCHED)

    def to_merged(self) -> None:
        """Transition to MERGED."""
        self.transition_to(PipelineState.MERGED)

    def to_loaded(self) -> None:
        """Transition to LOADED."""
        self.transition_to(PipelineState.LOADED)

    def to_ranked(self) -> None:
        """Transition to RANKED."""
        self.transition_to(PipelineState.RANKED)

    def to_enriched(self) -> None:
        """Transition to ENRICHED."""
        self.transition_to(PipelineState.ENRICHED)

    def to_published(self) -> None:
        """Transition to PUBLISHED."""
        self.transition_to(PipelineState.PUBLISHED)

    def to_failed(self) -> None:
        """Transition to FAILED unless the run already ended."""
        if not self.is_terminal:
            self.transition_to(PipelineState.FAILED)
