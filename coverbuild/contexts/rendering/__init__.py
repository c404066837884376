"""
Rendering Context

Responsibilities:
- Reads book parameters from the LaTeX parameters file
- Runs the LaTeX compiler passes and the cover assembly
- Logs each step's output and enforces strict/best-effort failure policies
- Copies the finished cover PDF to the book root

Owns: compiler invocation, step logs, cover output
Never: Renders or edits document content itself
"""

from coverbuild.contexts.rendering.exceptions import (
    CoverBuildError,
    PreconditionError,
    StepFailedError,
)
from coverbuild.contexts.rendering.pipeline import BuildResult, BuildSettings, build_cover
from coverbuild.contexts.rendering.steps import RunOptions

__all__ = [
    "BuildResult",
    "BuildSettings",
    "CoverBuildError",
    "PreconditionError",
    "RunOptions",
    "StepFailedError",
    "build_cover",
]
