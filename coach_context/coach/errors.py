"""Error types for coaching context synthesis.

Anything that can be defaulted is defaulted inside the estimators. What is
left here cannot be, and is surfaced to the caller.
"""


class ContextError(RuntimeError):
    """Base class for coaching context errors."""


class ContextConfigurationError(ContextError):
    """Raised when the builder has no usable repository to read from."""


class ContextSynthesisError(ContextError):
    """Raised when a sub-query of the snapshot fan-out fails.

    No partial snapshot is ever returned. The failing exception is chained as
    ``__cause__``.

    Attributes:
        user_id: User the snapshot was being built for
        stage: Name of the sub-query that failed
    """

    def __init__(self, user_id: str, stage: str, cause: BaseException):
        self.user_id = user_id
        self.stage = stage
        super().__init__(f"Failed to build coaching context for user_id={user_id} at {stage}: {cause!r}")
