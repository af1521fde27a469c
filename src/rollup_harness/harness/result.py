"""Terminal outcome of a harness run."""

from __future__ import annotations

from dataclasses import dataclass

from rollup_harness.errors import DivergenceError, HarnessError


@dataclass(frozen=True, slots=True)
class RunResult:
    """
    Success, or the single failure cause that ended the run.

    Exactly one of these is produced per run.
    """

    cause: HarnessError | None = None
    """Why the run failed; None on success."""

    @classmethod
    def success(cls) -> RunResult:
        """The steady-state window elapsed with no violation."""
        return cls()

    @classmethod
    def failure(cls, cause: HarnessError) -> RunResult:
        """The run ended on `cause`."""
        return cls(cause=cause)

    @property
    def ok(self) -> bool:
        """Whether the run passed."""
        return self.cause is None

    @property
    def node_index(self) -> int | None:
        """Index of the node that triggered the failure, if any."""
        return None if self.cause is None else self.cause.node_index

    @property
    def outcome(self) -> str:
        """`success`, or the class name of the failure cause."""
        return "success" if self.cause is None else type(self.cause).__name__

    @property
    def diagnostic(self) -> str:
        """One line describing the outcome, suitable for a test report."""
        if self.cause is None:
            return "success"

        kind = type(self.cause).__name__
        if isinstance(self.cause, DivergenceError):
            kind = f"{kind} ({self.cause.kind.value})"
        return f"{kind}: {self.cause}"
