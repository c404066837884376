"""Custom exceptions for the cover build, carrying the exit status they map to."""

from pathlib import Path
from typing import Optional

# Distinctive status for a missing required input file
PRECONDITION_EXIT_CODE = 666


class CoverBuildError(Exception):
    """
    Base class for fatal build errors.

    Attributes:
        message: Error description
        exit_code: Process exit status the CLI should terminate with
    """

    exit_code: int = 1

    def __init__(self, message: str, exit_code: Optional[int] = None):
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class PreconditionError(CoverBuildError):
    """
    Raised before any work starts when a required input file is absent.

    Attributes:
        missing_path: The file that was expected to exist
    """

    def __init__(self, missing_path: Path, message: Optional[str] = None):
        self.missing_path = missing_path
        super().__init__(
            message or f"Required file not found: {missing_path}",
            exit_code=PRECONDITION_EXIT_CODE,
        )


class StepFailedError(CoverBuildError):
    """
    Raised when a strict step exits with a non-zero status.

    Attributes:
        step: The Step that failed
        returncode: Exit status reported by the step
        log_path: Log file holding the step's output, if it was logged
    """

    def __init__(self, step, returncode: int, log_path: Optional[Path] = None):
        self.step = step
        self.returncode = returncode
        self.log_path = log_path

        parts = [f"Step failed with exit status {returncode}: {step.command_line}"]
        if log_path is not None:
            parts.append(f"See log: {log_path}")

        super().__init__("\n".join(parts), exit_code=returncode)
