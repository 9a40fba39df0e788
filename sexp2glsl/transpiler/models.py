"""
Data models and configuration for the shader translator.

This module contains the dataclass definitions shared by the translation
passes, the command line interface and callers embedding the translator.
"""

import os
from dataclasses import dataclass, field
from enum import Enum, auto

from sexp2glsl.transpiler.forms import Node


class ShaderStage(Enum):
    """Shader pipeline stage."""

    VERTEX = auto()
    FRAGMENT = auto()


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TranslatorConfig:
    """Options controlling how forms are translated to GLSL.

    Attributes:
        indent: Text prefixed to every line inside a braced block
        version: GLSL version emitted as ``#version <version>``, or None to omit it
        strict_functions: Reject calls to functions that are neither GLSL
            builtins, program functions nor listed in ``extra_functions``
        extra_functions: Additional function names accepted in strict mode
        max_generation_rounds: Upper bound on import resolution rounds
        max_expansion_depth: Upper bound on repeated macro expansion of one form
    """

    indent: str = "  "
    version: str | None = None
    strict_functions: bool = False
    extra_functions: frozenset[str] = field(default_factory=frozenset)
    max_generation_rounds: int = 64
    max_expansion_depth: int = 64

    @classmethod
    def from_env(cls) -> "TranslatorConfig":
        """Build a configuration from SEXP2GLSL_* environment variables."""
        rounds = os.environ.get("SEXP2GLSL_MAX_GENERATION_ROUNDS")
        return cls(
            version=os.environ.get("SEXP2GLSL_VERSION") or None,
            strict_functions=_env_flag("SEXP2GLSL_STRICT"),
            max_generation_rounds=int(rounds) if rounds else 64,
        )


@dataclass(frozen=True)
class ProgramSource:
    """GLSL sources for both stages of a program."""

    vertex_source: str
    fragment_source: str


@dataclass
class ShaderProgram:
    """A shader program read from a program file.

    Attributes:
        declarations: Declaration entries shared by both stages
        vertex: Body forms of the vertex shader
        fragment: Body forms of the fragment shader
        extensions: Raw directive text prepended to both stages
    """

    declarations: list[Node] = field(default_factory=list)
    vertex: list[Node] = field(default_factory=list)
    fragment: list[Node] = field(default_factory=list)
    extensions: str = ""
