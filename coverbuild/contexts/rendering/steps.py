"""
Step Runner

Each pipeline step is a structured record (tool, arguments, log target, failure
policy) executed through subprocess with an argument vector, never through a shell.

Failure policies:
    STRICT       - non-zero exit raises StepFailedError, aborting the build
    BEST_EFFORT  - non-zero exit is logged and the build continues

Log policies (where a logged step's output goes):
    TEE                   - stdout is copied to the console and the log file
    REDIRECT              - stream N goes to the log file only
    REDIRECT_BEST_EFFORT  - as REDIRECT, and the step is treated as best-effort
"""

import shlex
import subprocess
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from coverbuild.contexts.rendering.exceptions import StepFailedError
from coverbuild.contexts.rendering.logger import _log_error, log_step_result, log_step_start

TRIAL_PREFIX = "[trial]"
VERBOSE_PREFIX = "+"

# Statuses a POSIX shell reports when a command cannot be run
COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127

STDOUT = 1
STDERR = 2


class FailurePolicy(Enum):
    STRICT = "strict"
    BEST_EFFORT = "best_effort"


class LogPolicy(Enum):
    TEE = "tee"
    REDIRECT = "redirect"
    REDIRECT_BEST_EFFORT = "redirect_best_effort"


@dataclass(frozen=True)
class LogTarget:
    """Where a logged step's output goes."""

    policy: LogPolicy = LogPolicy.TEE
    stream: int = STDOUT

    def __post_init__(self):
        if self.stream not in (STDOUT, STDERR):
            raise ValueError(f"Only stdout (1) and stderr (2) can be logged, got {self.stream}")

    @classmethod
    def from_stream_selector(cls, selector: int) -> "LogTarget":
        """
        Map the 0 / +N / -N stream selector onto a log target.

        0 tees stdout, +N redirects stream N, -N redirects stream N best-effort.
        """
        if selector == 0:
            return cls(LogPolicy.TEE, STDOUT)
        if selector > 0:
            return cls(LogPolicy.REDIRECT, selector)
        return cls(LogPolicy.REDIRECT_BEST_EFFORT, -selector)


@dataclass
class Step:
    """
    A single external command in the pipeline.

    Attributes:
        tool: Executable name or path
        args: Arguments passed to the tool
        log: Log target, or None for an unlogged step
        failure_policy: Whether a non-zero exit aborts the build
        description: Progress message shown when the step starts
    """

    tool: str
    args: List[str] = field(default_factory=list)
    log: Optional[LogTarget] = None
    failure_policy: FailurePolicy = FailurePolicy.STRICT
    description: str = ""

    @property
    def argv(self) -> List[str]:
        return [self.tool, *self.args]

    @property
    def command_line(self) -> str:
        """Command line quoted for display."""
        return shlex.join(self.argv)

    @property
    def tool_name(self) -> str:
        return Path(self.tool).name

    @property
    def is_strict(self) -> bool:
        if self.log is not None and self.log.policy is LogPolicy.REDIRECT_BEST_EFFORT:
            return False
        return self.failure_policy is FailurePolicy.STRICT


@dataclass
class RunOptions:
    """Run-wide switches from the command line."""

    trial: bool = False
    verbose: bool = False
    quiet: bool = False


@dataclass
class PipelineContext:
    """
    Per-run state shared by the steps of one build.

    Owns the log sequence counter, which starts at 1 for every run so that a rerun
    overwrites the previous run's logs.
    """

    log_dir: Path
    log_index: int = 1
    log_files: List[Path] = field(default_factory=list)

    def next_log_path(self, tool: str) -> Path:
        """Return the log path for the next logged step and advance the counter."""
        log_path = self.log_dir / f"{self.log_index}_{Path(tool).name}.log"
        self.log_index += 1
        self.log_files.append(log_path)
        return log_path


class StepRunner:
    """
    Runs steps in a fixed working directory honoring trial and verbose modes.

    Args:
        options: Run-wide switches
        cwd: Working directory for every spawned process
    """

    def __init__(self, options: RunOptions, cwd: Path):
        self.options = options
        self.cwd = Path(cwd)

    def run(self, step: Step, context: Optional[PipelineContext] = None) -> int:
        """
        Run a step, logging to the context's next log file when the step is logged.

        Returns:
            The step's exit status (0 in trial mode)

        Raises:
            StepFailedError: If a strict step exits non-zero
        """
        log_path = None
        if step.log is not None:
            if context is None:
                raise ValueError("Logged steps need a PipelineContext")
            log_path = context.next_log_path(step.tool)

        if self.options.trial:
            typer.echo(f"{TRIAL_PREFIX} {self._display(step, log_path)}")
            return 0

        log_step_start(step, log_path)
        if self.options.verbose:
            typer.echo(f"{VERBOSE_PREFIX} {self._display(step, log_path)}")

        start_time = time.time()
        returncode = self._spawn(step, log_path)
        log_step_result(step, returncode, time.time() - start_time)

        if returncode != 0 and step.is_strict:
            raise StepFailedError(step, returncode, log_path)

        return returncode

    def _display(self, step: Step, log_path: Optional[Path]) -> str:
        """Command line with its redirection, as a shell would show it."""
        if log_path is None:
            return step.command_line
        if log_path.is_relative_to(self.cwd):
            log_path = log_path.relative_to(self.cwd)
        shown = shlex.quote(str(log_path))
        if step.log.policy is LogPolicy.TEE:
            return f"{step.command_line} | tee {shown}"
        return f"{step.command_line} {step.log.stream}> {shown}"

    def _spawn(self, step: Step, log_path: Optional[Path]) -> int:
        if log_path is None:
            return self._launch(step)
        with open(log_path, "w", encoding="utf-8") as log_file:
            if step.log.policy is LogPolicy.TEE:
                return self._launch_tee(step, log_file)
            if step.log.stream == STDOUT:
                return self._launch(step, stdout=log_file)
            return self._launch(step, stderr=log_file)

    def _launch(self, step: Step, **streams) -> int:
        try:
            return subprocess.run(step.argv, cwd=self.cwd, **streams).returncode
        except OSError as e:
            return self._launch_failure(step, e)

    def _launch_tee(self, step: Step, log_file) -> int:
        try:
            process = subprocess.Popen(
                step.argv,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Compilers emit latin-1 font names
            )
        except OSError as e:
            return self._launch_failure(step, e)

        with process.stdout:
            for line in process.stdout:
                sys.stdout.write(line)
                log_file.write(line)
        return process.wait()

    def _launch_failure(self, step: Step, error: OSError) -> int:
        """Map a failure to start the process onto the status a shell would report."""
        if isinstance(error, FileNotFoundError):
            _log_error(f"Command not found: {step.tool}")
            return COMMAND_NOT_FOUND
        _log_error(f"Cannot execute {step.tool}: {error}")
        return COMMAND_NOT_EXECUTABLE
