from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .lib.retry import RetryOutcome
    from .prerequisites import PrerequisiteReport


class InstallerError(RuntimeError):
    """Base class for fatal installer errors."""


class ConfigError(InstallerError):
    pass


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class RetryError(InstallerError):
    """Raised when an action keeps failing after every allowed attempt."""

    def __init__(self, outcome: "RetryOutcome") -> None:
        self.outcome = outcome
        super().__init__(
            f"{outcome.action} failed after {outcome.attempts} attempt(s): {outcome.last_error}"
        )

    @property
    def action(self) -> str:
        return self.outcome.action

    @property
    def attempts(self) -> int:
        return self.outcome.attempts

    @property
    def last_error(self) -> BaseException | None:
        return self.outcome.last_error


class PrerequisiteError(InstallerError):
    def __init__(self, report: "PrerequisiteReport") -> None:
        self.report = report
        super().__init__("Prerequisite check failed: " + "; ".join(report.fatal))


class ComponentInstallError(InstallerError):
    def __init__(self, component: str, reason: str) -> None:
        self.component = component
        self.reason = reason
        super().__init__(f"{component} installation failed: {reason}")
