"""Command line interface for sexp2glsl.

This module provides a command-line interface for translating shader program
files written as s-expressions into GLSL vertex and fragment sources.
"""

import os
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
from loguru import logger
from watchdog.events import FileSystemEventHandler

from sexp2glsl.transpiler import compile_program, compile_shader
from sexp2glsl.transpiler.errors import TranspilerError
from sexp2glsl.transpiler.models import ProgramSource, ShaderStage, TranslatorConfig
from sexp2glsl.transpiler.reader import load_program

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="sexp2glsl",
    help=(
        "Translate s-expression shader programs into GLSL. "
        "Commands: compile, export, watch."
    ),
    add_completion=False,
)

SHADER_FILE_ARG = typer.Argument(..., help="Shader program file (.sx)")
OUTPUT_DIR_ARG = typer.Argument(..., help="Directory receiving .vert and .frag files")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
) -> None:
    """Configure logging for all commands."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _make_config(version: str | None, strict: bool) -> TranslatorConfig:
    base = TranslatorConfig.from_env()
    return TranslatorConfig(
        version=version or base.version,
        strict_functions=strict or base.strict_functions,
        max_generation_rounds=base.max_generation_rounds,
    )


def _map_stage(stage: str) -> ShaderStage:
    """Map a stage name to a shader stage.

    Args:
        stage: Stage name ("vertex" or "fragment")

    Returns:
        The matching shader stage
    """
    try:
        return ShaderStage[stage.upper()]
    except KeyError:
        logger.error(f"Unknown stage: {stage}. Use 'vertex' or 'fragment'.")
        raise typer.Exit(1) from None


def _compile_file(shader_file: Path, config: TranslatorConfig) -> ProgramSource:
    """Compile both stages of a program file.

    Args:
        shader_file: Path to the shader program file
        config: Translator configuration

    Returns:
        Vertex and fragment sources
    """
    program = load_program(shader_file)
    logger.info(
        f"Loaded {shader_file.name}: {len(program.declarations)} declarations, "
        f"{len(program.vertex)} vertex forms, {len(program.fragment)} fragment forms"
    )
    return compile_program(
        program.declarations,
        program.vertex,
        program.fragment,
        extensions=program.extensions,
        config=config,
    )


def _add_header_comments(code: str, source_file: Path, stage: ShaderStage) -> str:
    """Add header comments to the code.

    The header goes after a leading #version directive, which GLSL requires
    to be the first line.

    Args:
        code: Source code
        source_file: Source shader program file
        stage: Stage the code was compiled for

    Returns:
        Code with header comments
    """
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    header = f"// Generated by sexp2glsl v{__import__('sexp2glsl').__version__}\n"
    header += f"// Generation time: {timestamp}\n"
    header += f"// Source file: {source_file.name}\n"
    header += f"// Stage: {stage.name.lower()}\n"

    if code.startswith("#version"):
        version_line, _, rest = code.partition("\n")
        return f"{version_line}\n{header}{rest}"
    return header + code


def _export(
    shader_file: Path, output_dir: Path, format: str, config: TranslatorConfig
) -> tuple[Path, Path]:
    """Compile a program file and write its stages next to each other.

    Returns:
        Paths of the written vertex and fragment files
    """
    sources = _compile_file(shader_file, config)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for stage, code, suffix in (
        (ShaderStage.VERTEX, sources.vertex_source, ".vert"),
        (ShaderStage.FRAGMENT, sources.fragment_source, ".frag"),
    ):
        if format == "commented":
            code = _add_header_comments(code, shader_file, stage)
        path = output_dir / f"{shader_file.stem}{suffix}"
        path.write_text(code)
        logger.info(f"Wrote {stage.name.lower()} shader to {path}")
        written.append(path)

    return written[0], written[1]


@typed_command(app.command("compile"))
def compile_command(
    shader_file: Path = SHADER_FILE_ARG,
    stage: str = typer.Option(
        "vertex", "--stage", "-s", help="Shader stage (vertex, fragment)"
    ),
    version: str = typer.Option(
        "", "--version", help="GLSL version directive, e.g. 120"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Reject calls to unknown functions"
    ),
) -> None:
    """Print the GLSL source of one stage.

    Example: sexp2glsl compile examples/phong.sx --stage fragment
    """
    shader_stage = _map_stage(stage)
    config = _make_config(version or None, strict)
    try:
        program = load_program(shader_file)
        is_vertex = shader_stage == ShaderStage.VERTEX
        body = program.vertex if is_vertex else program.fragment
        code = compile_shader(
            shader_stage,
            program.declarations,
            body,
            extensions=program.extensions,
            config=config,
        )
    except OSError as e:
        logger.error(f"Failed to read shader program: {e}")
        raise typer.Exit(1) from e
    except TranspilerError as e:
        logger.error(f"Translation error: {e}")
        raise typer.Exit(1) from e

    typer.echo(code, nl=False)


@typed_command(app.command("export"))
def export_command(
    shader_file: Path = SHADER_FILE_ARG,
    output_dir: Path = OUTPUT_DIR_ARG,
    format: str = typer.Option(
        "plain", "--format", "-f", help="Code format (plain, commented)"
    ),
    version: str = typer.Option(
        "", "--version", help="GLSL version directive, e.g. 120"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Reject calls to unknown functions"
    ),
) -> None:
    """Export both stages to <name>.vert and <name>.frag.

    Example: sexp2glsl export examples/phong.sx build/shaders --format commented
    """
    if format not in ("plain", "commented"):
        logger.error(f"Unknown format: {format}. Use 'plain' or 'commented'.")
        raise typer.Exit(1)

    config = _make_config(version or None, strict)
    try:
        _export(shader_file, output_dir, format, config)
    except OSError as e:
        logger.error(f"Failed to export shader program: {e}")
        raise typer.Exit(1) from e
    except TranspilerError as e:
        logger.error(f"Translation error: {e}")
        raise typer.Exit(1) from e

    logger.info("✓ Ready for use with OpenGL")


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler re-exporting a shader program when it changes."""

    def __init__(
        self, shader_file: Path, output_dir: Path, format: str, config: TranslatorConfig
    ):
        """Initialize shader change handler.

        Args:
            shader_file: Path to shader program file
            output_dir: Directory receiving the exported stages
            format: Code format (plain, commented)
            config: Translator configuration
        """
        self.shader_file = shader_file
        self.output_dir = output_dir
        self.format = format
        self.config = config

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if os.path.abspath(event.src_path) == str(self.shader_file):
            logger.info(f"Detected changes in {self.shader_file.name}")
            self.export()

    def export(self) -> bool:
        """Export the program, logging instead of raising on failure.

        Returns:
            True if both stages were written
        """
        try:
            _export(self.shader_file, self.output_dir, self.format, self.config)
        except (OSError, TranspilerError) as e:
            logger.error(f"Error exporting shader: {e}")
            return False
        return True


@typed_command(app.command("watch"))
def watch_command(
    shader_file: Path = SHADER_FILE_ARG,
    output_dir: Path = OUTPUT_DIR_ARG,
    format: str = typer.Option(
        "plain", "--format", "-f", help="Code format (plain, commented)"
    ),
    version: str = typer.Option(
        "", "--version", help="GLSL version directive, e.g. 120"
    ),
) -> None:
    """Watch a shader program and re-export it on changes.

    Example: sexp2glsl watch examples/phong.sx build/shaders
    """
    abs_shader_file = shader_file.resolve()
    handler = ShaderChangeHandler(
        abs_shader_file, output_dir, format, _make_config(version or None, False)
    )
    handler.export()

    # Watch the file's directory, not the file itself
    observer = watchdog.observers.Observer()
    observer.schedule(handler, path=str(abs_shader_file.parent), recursive=False)
    observer.start()
    logger.info(f"Watching {abs_shader_file} (press Ctrl+C to stop)")

    try:
        while observer.is_alive():
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
