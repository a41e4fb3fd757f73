"""Errors raised by the digest pipeline."""


class PipelineError(Exception):
    """Base class for pipeline failures surfaced to the caller."""


class PreconditionError(PipelineError):
    """A run was requested without what it needs (credentials, mode, ...)."""


class PipelineStateError(PipelineError):
    """Raised when a run tries to skip or repeat a phase."""

    def __init__(self, run_id: str, from_state: str, to_state: str) -> None:
        """Initialize the transition error.

        Args:
            run_id: Identifier of the run.
            from_state: Current phase.
            to_state: Attempted next phase.
        """
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal pipeline transition for run '{run_id}': "
            f"{from_state} -> {to_state}"
        )
