"""
Generation pass: lifting imported forms into the program.

Generator forms are replaced at compile time by additional top-level forms.
The only builtin generator is ``import``:

    (import (lighting phong-diffuse ambient) (noise simplex))

Each listed symbol is resolved against a binding table and the bound form,
usually a ``defn``, is added to the program ahead of the code using it.
"""

from collections.abc import Iterator

from loguru import logger

from sexp2glsl.transpiler.bindings import Bindings, ModuleBindings
from sexp2glsl.transpiler.constants import GENERATOR_FORMS
from sexp2glsl.transpiler.errors import (
    ImportCycleError,
    MalformedFormError,
    MissingBindingError,
)
from sexp2glsl.transpiler.forms import Call, Node, Symbol, walk
from sexp2glsl.transpiler.macros import expand
from sexp2glsl.transpiler.models import TranslatorConfig

BindingKey = tuple[str, str]


def _import_keys(form: Call) -> Iterator[BindingKey]:
    for spec in form.args:
        match spec:
            case Call(Symbol(namespace), names) if all(
                isinstance(name, Symbol) for name in names
            ):
                for name in names:
                    yield namespace, name.name
            case _:
                raise MalformedFormError(
                    "import expects (namespace symbol ...) specifications", form
                )


def _scan(form: Node) -> Iterator[tuple[Call, BindingKey]]:
    """Find every generator form in a tree, yielding the bindings it imports."""
    for node in walk(form):
        if isinstance(node, Call) and node.name in GENERATOR_FORMS:
            for key in _import_keys(node):
                yield node, key


def _resolve(bindings: Bindings, key: BindingKey, import_form: Call) -> Node:
    namespace, name = key
    try:
        return bindings.resolve(namespace, name)
    except MissingBindingError as e:
        raise e.with_form(import_form) from e



def _lift_imports(
    form: Node,
    chain: tuple[BindingKey, ...],
    bindings: Bindings,
    config: TranslatorConfig,
    resolved: dict[BindingKey, Node],
    program: list[Node],
) -> None:
    """Append the forms imported by ``form`` to the program, dependencies first.

    Each binding is resolved and expanded once; later imports of the same key
    reuse the entry in ``resolved``. ``chain`` holds the keys being lifted
    above ``form``.
    """
    for import_form, key in _scan(form):
        if key in chain:
            namespace, name = key
            raise ImportCycleError(
                f"Import of '{namespace}/{name}' forms a cycle", import_form
            )
        if key in resolved:
            continue
        if len(chain) >= config.max_generation_rounds:
            raise ImportCycleError(
                f"Imports did not settle after {config.max_generation_rounds} rounds",
                import_form,
            )

        imported = expand(_resolve(bindings, key, import_form), config)
        resolved[key] = imported
        logger.debug(f"Resolved import {key[0]}/{key[1]} at depth {len(chain) + 1}")

        _lift_imports(imported, chain + (key,), bindings, config, resolved, program)
        program.append(imported)


def generate(
    root: Node,
    bindings: Bindings | None = None,
    config: TranslatorConfig | None = None,
) -> list[Node]:
    """Resolve generator forms until no new forms are produced.

    Imports are followed depth first. Every imported form is placed after the
    forms it imports and before its first importer, with the root last. A
    binding imported from several places appears once.

    Args:
        root: Macro-expanded program root, usually the ``main`` form
        bindings: Table used to resolve imports, Python modules by default
        config: Translator configuration bounding the import depth

    Returns:
        Program forms in emission order

    Raises:
        MissingBindingError: If an imported symbol cannot be resolved
        ImportCycleError: If an import chain revisits a binding or nests
            deeper than ``max_generation_rounds``
    """
    bindings = bindings or ModuleBindings()
    config = config or TranslatorConfig()

    program: list[Node] = []
    _lift_imports(root, (), bindings, config, {}, program)
    program.append(root)

    logger.debug(f"Generated program with {len(program)} top-level forms")
    return program
