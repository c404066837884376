"""
Cover Build Pipeline

Builds a paperback cover PDF from three LaTeX sources (front, back, spine) and an
assembly document that composites them.

Sequence (each step must succeed before the next starts):
    PreconditionCheck -> DirSetup -> StatsReport
    -> pass 1 (front, back, spine) -> pass 2 (front, back, spine)
    -> Assemble -> Cleanup (best-effort) -> CopyOut

Every sub-document is compiled twice because values computed on the first pass
(spine width, cross-references) are only read back on the second.
"""

import os
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv

from coverbuild.contexts.rendering.exceptions import PreconditionError, StepFailedError
from coverbuild.contexts.rendering.logger import _log_debug, _log_info
from coverbuild.contexts.rendering.parameters import BookParameters, read_book_parameters
from coverbuild.contexts.rendering.steps import (
    TRIAL_PREFIX,
    VERBOSE_PREFIX,
    FailurePolicy,
    LogPolicy,
    LogTarget,
    PipelineContext,
    RunOptions,
    Step,
    StepRunner,
)
from coverbuild.utils.pdf_processing import page_count

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
LATEX_CLEANUP_COMMAND = os.getenv("LATEX_CLEANUP_COMMAND", "latexmk -c")
COVER_SOURCE_EXT = os.getenv("COVER_SOURCE_EXT", ".tex")
COVER_DEST_DIR = os.getenv("COVER_DEST_DIR", "cover")

COMPILER_FLAGS = ["-synctex=1", "-interaction=nonstopmode"]
PARAMETERS_STEM = "BookParameters"
SUB_DOCUMENTS = ["FrontCover", "BackCover", "SpineCover"]
ASSEMBLY_DOCUMENT = "Cover"
LOGS_DIRNAME = "logs"
NUM_PASSES = 2


@dataclass
class BuildSettings:
    """
    Where the cover sources live and which tools build them.

    Attributes:
        root: Invocation root holding the parameters file
        dest_dirname: Cover directory under root; tools run inside it
        source_ext: Extension of the LaTeX sources
        compiler: LaTeX compiler executable
        compiler_flags: Flags passed on every compiler run
        cleanup_command: Command removing compiler intermediates
        sub_documents: Documents compiled on each pass, in order
        assembly_document: Document compositing the sub-documents
        num_passes: Compiler passes per sub-document
    """

    root: Path = field(default_factory=Path.cwd)
    dest_dirname: str = COVER_DEST_DIR
    source_ext: str = COVER_SOURCE_EXT
    compiler: str = field(default_factory=lambda: LATEX_COMPILER)
    compiler_flags: List[str] = field(default_factory=lambda: list(COMPILER_FLAGS))
    cleanup_command: List[str] = field(
        default_factory=lambda: shlex.split(LATEX_CLEANUP_COMMAND)
    )
    sub_documents: List[str] = field(default_factory=lambda: list(SUB_DOCUMENTS))
    assembly_document: str = ASSEMBLY_DOCUMENT
    num_passes: int = NUM_PASSES

    def __post_init__(self):
        self.root = Path(self.root).resolve()
        if isinstance(self.cleanup_command, str):
            self.cleanup_command = shlex.split(self.cleanup_command)
        if not self.cleanup_command:
            raise ValueError("cleanup_command must name a command")

    @property
    def dest_dir(self) -> Path:
        return self.root / self.dest_dirname

    @property
    def log_dir(self) -> Path:
        return self.dest_dir / LOGS_DIRNAME

    @property
    def parameters_file(self) -> Path:
        return self.root / f"{PARAMETERS_STEM}{self.source_ext}"

    @property
    def assembly_source(self) -> Path:
        return self.dest_dir / f"{self.assembly_document}{self.source_ext}"

    @property
    def output_pdf(self) -> Path:
        return self.dest_dir / f"{self.assembly_document}.pdf"

    @property
    def final_pdf(self) -> Path:
        return self.root / f"{self.assembly_document}.pdf"


@dataclass
class BuildResult:
    """
    Outcome of a build that ran to completion.

    Attributes:
        pdf_path: Cover PDF copied to the invocation root
        log_files: Step logs in sequence order
        parameters: Book parameters reported before the build
        page_count: Pages in the cover PDF (None if unreadable or trial run)
        trial: Whether this was a trial run (nothing executed)
    """

    pdf_path: Path
    log_files: List[Path] = field(default_factory=list)
    parameters: BookParameters = field(default_factory=BookParameters)
    page_count: Optional[int] = None
    trial: bool = False


def check_preconditions(settings: BuildSettings) -> None:
    """
    Ensure the parameters file and the assembly source exist.

    Raises:
        PreconditionError: For the first required file that is missing
    """
    if not settings.parameters_file.is_file():
        raise PreconditionError(
            settings.parameters_file,
            f"Parameters file not found: {settings.parameters_file.name}",
        )
    if not settings.assembly_source.is_file():
        raise PreconditionError(
            settings.assembly_source,
            "Cover assembly source not found: "
            f"{settings.assembly_source.relative_to(settings.root)}",
        )


def _compile_step(settings: BuildSettings, document: str, description: str) -> Step:
    return Step(
        tool=settings.compiler,
        args=[*settings.compiler_flags, f"{document}{settings.source_ext}"],
        log=LogTarget(LogPolicy.REDIRECT),
        failure_policy=FailurePolicy.STRICT,
        description=description,
    )


def plan_steps(settings: BuildSettings) -> List[Step]:
    """
    Return the logged steps of a build in execution order.

    The final copy is not included; it runs in-process (see copy_output).
    """
    steps = []
    for pass_number in range(1, settings.num_passes + 1):
        for document in settings.sub_documents:
            steps.append(
                _compile_step(
                    settings, document, f"Pass {pass_number}: compiling {document}"
                )
            )

    steps.append(
        _compile_step(
            settings,
            settings.assembly_document,
            f"Assembling {settings.assembly_document}",
        )
    )

    tool, *args = settings.cleanup_command
    steps.append(
        Step(
            tool=tool,
            args=args,
            log=LogTarget(LogPolicy.REDIRECT_BEST_EFFORT),
            failure_policy=FailurePolicy.BEST_EFFORT,
            description="Removing intermediate files",
        )
    )
    return steps


def setup_directories(settings: BuildSettings, options: RunOptions) -> None:
    """Create the logs directory under the cover directory."""
    if options.trial:
        print_command(
            TRIAL_PREFIX, ["mkdir", "-p", str(settings.log_dir.relative_to(settings.root))]
        )
        return
    settings.log_dir.mkdir(parents=True, exist_ok=True)


def copy_output(settings: BuildSettings, options: RunOptions) -> None:
    """
    Copy the assembled PDF from the cover directory to the invocation root.

    Raises:
        StepFailedError: With status 1 if the copy fails
    """
    copy_step = Step(
        tool="cp",
        args=[
            settings.output_pdf.name,
            os.path.relpath(settings.final_pdf, settings.dest_dir),
        ],
        description=f"Copying {settings.output_pdf.name} to {settings.root}",
    )

    if options.trial:
        print_command(TRIAL_PREFIX, copy_step.argv)
        return

    _log_info(copy_step.description)
    if options.verbose:
        print_command(VERBOSE_PREFIX, copy_step.argv)

    try:
        shutil.copy2(settings.output_pdf, settings.final_pdf)
    except OSError as e:
        _log_debug(f"Copy failed: {e}")
        raise StepFailedError(copy_step, 1) from e


def print_command(prefix: str, argv: List[str]) -> None:
    """Echo a command line that is not spawned as a Step."""
    typer.echo(f"{prefix} {shlex.join(argv)}")


def build_cover(settings: BuildSettings, options: RunOptions) -> BuildResult:
    """
    Run the full cover build.

    Child processes run inside the cover directory; the calling process keeps its
    own working directory.

    Args:
        settings: Source locations and tools
        options: Trial, verbose and quiet switches

    Returns:
        BuildResult describing the copied PDF and the logs written

    Raises:
        PreconditionError: Before any work if a required input is missing
        StepFailedError: As soon as a strict step fails; later steps do not run
    """
    check_preconditions(settings)
    setup_directories(settings, options)

    parameters = read_book_parameters(settings.parameters_file, trial=options.trial)
    _log_info(parameters.summary())

    context = PipelineContext(log_dir=settings.log_dir)
    runner = StepRunner(options, cwd=settings.dest_dir)
    for step in plan_steps(settings):
        runner.run(step, context)

    copy_output(settings, options)

    pdf_pages = None if options.trial else page_count(settings.final_pdf)
    if pdf_pages is not None:
        _log_debug(f"{settings.final_pdf.name}: {pdf_pages} page(s)")

    return BuildResult(
        pdf_path=settings.final_pdf,
        log_files=list(context.log_files),
        parameters=parameters,
        page_count=pdf_pages,
        trial=options.trial,
    )
