"""
Translation of shader forms into GLSL source.

This module provides the top-level interface: declarations plus a shader body
go through macro expansion, generation and emission, and come back as a
string of GLSL ready to hand to the driver's shader compiler.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from loguru import logger

from sexp2glsl.transpiler.bindings import Bindings
from sexp2glsl.transpiler.emitter import Emitter
from sexp2glsl.transpiler.forms import (
    NODE_TYPES,
    Call,
    Node,
    Symbol,
    Vector,
    to_form,
    to_source,
    walk,
)
from sexp2glsl.transpiler.generator import generate
from sexp2glsl.transpiler.macros import expand
from sexp2glsl.transpiler.models import ProgramSource, ShaderStage, TranslatorConfig
from sexp2glsl.transpiler.reader import read

FormLike = Node | tuple[Any, ...] | list[Any] | str | int | float | bool


def _coerce_body(body: FormLike | Iterable[FormLike]) -> list[Node]:
    """Accept a single form or a sequence of forms as a shader body.

    Args:
        body: A node, a tuple form such as ``("set!", "x", 1)``, or an
            iterable of either

    Returns:
        List of body forms
    """
    if isinstance(body, str):
        return read(body)
    if isinstance(body, NODE_TYPES):
        return [body]
    if isinstance(body, tuple) and body and isinstance(body[0], str):
        return [to_form(body)]
    return [to_form(item) for item in body]


def _coerce_declarations(declarations: Iterable[FormLike] | None) -> list[Node]:
    return [to_form(declaration) for declaration in declarations or ()]


def qualifier(declaration: Node) -> str | None:
    """Return the leading qualifier symbol of a declaration entry, if any."""
    match declaration:
        case Vector((Symbol(name), *_)):
            return name
        case Call(Symbol(name), _):
            return name
    return None


def _defined_functions(forms: Sequence[Node]) -> set[str]:
    names = set()
    for form in forms:
        for node in walk(form):
            if isinstance(node, Call) and node.name == "defn" and len(node.args) > 1:
                name = node.args[1]
                if isinstance(name, Symbol):
                    names.add(name.name)
    return names


def _header(config: TranslatorConfig, extensions: str = "") -> str:
    """Version directive and extension text placed ahead of the declarations."""
    parts = []
    if config.version:
        parts.append(f"#version {config.version}\n")
    if extensions:
        parts.append(extensions if extensions.endswith("\n") else f"{extensions}\n")
    return "".join(parts)


def _translate(
    declarations: list[Node],
    body: FormLike | Iterable[FormLike],
    bindings: Bindings | None,
    config: TranslatorConfig,
) -> str:
    main = Call(Symbol("main"), tuple(_coerce_body(body)))

    expanded = expand(main, config)
    logger.debug(f"Expanded shader body: {to_source(expanded)}")

    program = generate(expanded, bindings, config)
    emitter = Emitter(config, known_functions=_defined_functions(program))
    return emitter.emit_declarations(declarations) + emitter.emit_program(program)


def translate_shader(
    declarations: Iterable[FormLike] | None,
    body: FormLike | Iterable[FormLike],
    *,
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> str:
    """Translate declarations and a shader body into GLSL source.

    The body is wrapped in a ``main`` entry point, macro-expanded, has its
    imports resolved and is emitted after the declaration section.

    Args:
        declarations: Declaration entries such as ``["uniform", "float", "time"]``
        body: Statements of the shader's main function
        bindings: Table used to resolve ``import`` forms
        config: Translator configuration

    Returns:
        GLSL source text

    Raises:
        TranspilerError: If a form is malformed or an import cannot be resolved
    """
    config = config or TranslatorConfig()
    return _header(config) + _translate(
        _coerce_declarations(declarations), body, bindings, config
    )


def compile_shader(
    stage: ShaderStage,
    declarations: Iterable[FormLike] | None,
    body: FormLike | Iterable[FormLike],
    *,
    extensions: str = "",
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> str:
    """Compile a shader body for one pipeline stage.

    Fragment shaders drop ``attribute`` declarations, which GLSL only allows
    in the vertex stage.

    Args:
        stage: Pipeline stage being compiled
        declarations: Declaration entries shared between stages
        body: Statements of the shader's main function
        extensions: Directive text such as ``#extension`` pragmas, prepended verbatim
        bindings: Table used to resolve ``import`` forms
        config: Translator configuration

    Returns:
        GLSL source text for the stage
    """
    config = config or TranslatorConfig()
    declaration_forms = _coerce_declarations(declarations)
    if stage == ShaderStage.FRAGMENT:
        declaration_forms = [
            d for d in declaration_forms if qualifier(d) != "attribute"
        ]

    logger.debug(
        f"Compiling {stage.name.lower()} shader with "
        f"{len(declaration_forms)} declarations"
    )
    return _header(config, extensions) + _translate(
        declaration_forms, body, bindings, config
    )


def compile_vertex_source(
    declarations: Iterable[FormLike] | None,
    body: FormLike | Iterable[FormLike],
    *,
    extensions: str = "",
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> str:
    """Compile declarations and a vertex shader body into GLSL source."""
    return compile_shader(
        ShaderStage.VERTEX,
        declarations,
        body,
        extensions=extensions,
        bindings=bindings,
        config=config,
    )


def compile_fragment_source(
    declarations: Iterable[FormLike] | None,
    body: FormLike | Iterable[FormLike],
    *,
    extensions: str = "",
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> str:
    """Compile declarations, minus attributes, and a fragment shader body."""
    return compile_shader(
        ShaderStage.FRAGMENT,
        declarations,
        body,
        extensions=extensions,
        bindings=bindings,
        config=config,
    )


def compile_program(
    declarations: Iterable[FormLike] | None,
    vertex: FormLike | Iterable[FormLike],
    fragment: FormLike | Iterable[FormLike],
    *,
    extensions: str = "",
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> ProgramSource:
    """Compile both stages of a program from shared declarations.

    Examples:
        sources = compile_program(
            [["uniform", "float", "time"], ["attribute", "vec3", "offset"]],
            [("set!", ":position", ("ftransform",))],
            [("set!", ":frag-color", ("vec4", "time", 0.0, 0.0, 1.0))],
        )
    """
    declaration_forms = _coerce_declarations(declarations)
    return ProgramSource(
        vertex_source=compile_vertex_source(
            declaration_forms,
            vertex,
            extensions=extensions,
            bindings=bindings,
            config=config,
        ),
        fragment_source=compile_fragment_source(
            declaration_forms,
            fragment,
            extensions=extensions,
            bindings=bindings,
            config=config,
        ),
    )
