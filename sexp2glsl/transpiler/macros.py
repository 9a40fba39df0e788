"""
Macro expansion for shader forms.

Macros are sugar that rewrites into core forms before generation and emission:

    (let [a 1 b 2] body...)  -> (do (set! a 1) (set! b 2) body...)
    (-> x f (g y))           -> (g (f x) y)
"""

from sexp2glsl.transpiler.constants import MACRO_FORMS
from sexp2glsl.transpiler.errors import MalformedFormError, TranspilerError
from sexp2glsl.transpiler.forms import Call, Empty, Node, Symbol, Vector
from sexp2glsl.transpiler.models import TranslatorConfig


def _expand_let(form: Call) -> Node:
    if not form.args:
        raise MalformedFormError("let requires a binding vector", form)

    bindings, *body = form.args
    match bindings:
        case Vector(items):
            pass
        case Empty():
            items = ()
        case _:
            raise MalformedFormError("let bindings must be a vector", form)

    if len(items) % 2:
        raise MalformedFormError("let requires an even number of binding forms", form)

    assignments = [
        Call(Symbol("set!"), (items[i], items[i + 1])) for i in range(0, len(items), 2)
    ]
    return Call(Symbol("do"), (*assignments, *body))


def _thread(term: Node, step: Node) -> Node:
    if isinstance(step, Call):
        return Call(step.operator, (term, *step.args))
    if isinstance(step, Symbol):
        return Call(step, (term,))
    raise MalformedFormError("Threading steps must be calls or symbols", step)


def _expand_thread(form: Call) -> Node:
    if not form.args:
        raise MalformedFormError("-> requires an initial expression", form)

    term, *steps = form.args
    for step in steps:
        term = _thread(term, step)
    return term


def expand_form(form: Node) -> Node:
    """Apply a single macro expansion step to the root of a form.

    Forms that are not macros are returned unchanged.
    """
    if not isinstance(form, Call):
        return form

    match form.name:
        case "let":
            return _expand_let(form)
        case "->":
            return _expand_thread(form)
        case _:
            return form


def _is_macro(form: Node) -> bool:
    return isinstance(form, Call) and form.name in MACRO_FORMS


def expand(form: Node, config: TranslatorConfig | None = None) -> Node:
    """Expand every macro in a tree.

    The tree is rewritten top-down: each node is expanded until it is no longer
    a macro form, then its children are expanded in turn, so macros produced by
    an expansion are processed as well.

    Args:
        form: Root of the tree to expand
        config: Translator configuration bounding repeated expansion

    Returns:
        A new tree with no macro forms left in it

    Raises:
        MalformedFormError: If a macro form has the wrong shape
        TranspilerError: If a form keeps expanding into macros
    """
    config = config or TranslatorConfig()

    depth = 0
    while _is_macro(form):
        if depth >= config.max_expansion_depth:
            raise TranspilerError(
                f"Macro expansion did not settle after {depth} steps", form
            )
        form = expand_form(form)
        depth += 1

    match form:
        case Call(operator, args):
            return Call(operator, tuple(expand(arg, config) for arg in args))
        case Vector(items):
            return Vector(tuple(expand(item, config) for item in items))
    return form
