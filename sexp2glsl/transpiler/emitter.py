"""Code emitter that renders expanded shader forms as GLSL text."""

from collections.abc import Iterable, Sequence

from sexp2glsl.transpiler.constants import (
    ASSIGNMENT_OPERATORS,
    BUILTIN_FUNCTIONS,
    INFIX_OPERATORS,
    TYPE_CONSTRUCTORS,
    UNARY_OPERATORS,
)
from sexp2glsl.transpiler.errors import MalformedFormError, UnknownOperatorError
from sexp2glsl.transpiler.forms import (
    Call,
    Empty,
    Keyword,
    Literal,
    Node,
    Symbol,
    Vector,
    is_member_access,
)
from sexp2glsl.transpiler.models import TranslatorConfig


def glsl_identifier(name: str) -> str:
    """Turn a hyphenated symbol name into a GLSL identifier."""
    return name.replace("-", "_")


def keyword_to_builtin(name: str) -> str:
    """Turn :model-view-matrix into gl_ModelViewMatrix."""
    return "gl_" + "".join(part[:1].upper() + part[1:] for part in name.split("-"))


def format_literal(value: int | float | bool | str) -> str:
    """Format a literal value as GLSL source."""
    match value:
        case bool():
            return "true" if value else "false"
        case float():
            # repr keeps a decimal point or exponent: 1.0, 1e-05
            return repr(value)
        case int():
            return str(value)
    # Raw GLSL text
    return value


def _is_prefix_form(form: Node) -> bool:
    match form:
        case Call(Symbol(op), _) if op in UNARY_OPERATORS:
            return True
        case Call(Symbol("-"), (_,)):
            return True
    return False


class Emitter:
    """Renders fully expanded forms as GLSL source."""

    def __init__(
        self,
        config: TranslatorConfig | None = None,
        known_functions: Iterable[str] = (),
    ):
        self.config = config or TranslatorConfig()
        self.known_functions = (
            BUILTIN_FUNCTIONS
            | TYPE_CONSTRUCTORS
            | self.config.extra_functions
            | {glsl_identifier(name) for name in known_functions}
        )

    # --- Blocks and statements ---

    def indent(self, text: str) -> str:
        """Indent every line of a block body."""
        if not text.strip():
            return ""
        lines = text.rstrip("\n").split("\n")
        return "".join(f"{self.config.indent}{line}\n" for line in lines)

    def emit_lines(self, forms: Sequence[Node], terminator: str = ";") -> str:
        """Render a sequence of statements.

        Forms rendering to blank text are dropped. Each remaining statement is
        terminated unless it already ends a line, as braced blocks do.
        """
        lines = []
        for form in forms:
            text = self.emit(form)
            if not text.strip():
                continue
            lines.append(text if text.endswith("\n") else f"{text}{terminator}\n")
        return "".join(lines)

    def emit_block(self, header: str, body: Sequence[Node]) -> str:
        return f"{header}\n{{\n{self.indent(self.emit_lines(body))}}}\n"

    def emit_program(self, forms: Sequence[Node]) -> str:
        """Render top-level program forms."""
        return self.emit_lines(forms)

    def emit_declarations(self, declarations: Sequence[Node]) -> str:
        """Render a declaration section, one ``declare`` statement per entry."""
        return self.emit_lines(
            [Call(Symbol("declare"), (declaration,)) for declaration in declarations]
        )

    # --- L-values ---

    def emit_lvalue(self, form: Node) -> str:
        """Render the left side of an assignment, a declaration or a parameter."""
        match form:
            case Keyword(name):
                return keyword_to_builtin(name)
            case Call(operator, args) if is_member_access(form):
                return " ".join(self.emit_lvalue(arg) for arg in args) + operator.name
            case Symbol(name):
                return glsl_identifier(name)
            case Empty():
                return ""
            case Literal(value):
                return format_literal(value)
            case Call(operator, args):
                return " ".join(self.emit_lvalue(part) for part in (operator, *args))
            case Vector(items):
                return " ".join(self.emit_lvalue(item) for item in items)
        raise MalformedFormError("Invalid l-value", form)

    # --- Expressions ---

    def emit(self, form: Node, nested: bool = False) -> str:
        """Render a form.

        Args:
            form: The form to render
            nested: Whether the form is an operand of an enclosing operator.
                Binary infix forms drop their outer parentheses at the root.

        Returns:
            GLSL source for the form
        """
        match form:
            case Call(operator, args) if is_member_access(form):
                if len(args) != 1:
                    raise MalformedFormError("Member access takes one operand", form)
                return f"{self._emit_postfix_operand(args[0])}{operator.name}"
            case Keyword(name):
                return keyword_to_builtin(name)
            case Symbol(name):
                return glsl_identifier(name)
            case Literal(value):
                return format_literal(value)
            case Empty():
                return ""
            case Vector():
                raise MalformedFormError("Vector used as an expression", form)
            case Call(Symbol(op), args) if op in INFIX_OPERATORS:
                return self._emit_infix(INFIX_OPERATORS[op], form, nested)
            case Call(Symbol(op), args) if op in UNARY_OPERATORS:
                self._check_arity(form, 1, 1)
                return UNARY_OPERATORS[op] + self.emit(args[0], nested=True)
            case Call(Symbol("-"), args) if len(args) == 1:
                operand = self.emit(args[0], nested=True)
                return f"-({operand})" if operand.startswith("-") else f"-{operand}"
            case Call(Symbol("-"), args):
                return self._emit_infix("-", form, nested)
            case Call(Symbol(op), args) if op in ASSIGNMENT_OPERATORS:
                return self._emit_assignment(ASSIGNMENT_OPERATORS[op], form)
            case Call(Symbol("nth"), args):
                self._check_arity(form, 2, 2)
                return f"{self._emit_postfix_operand(args[0])}[{self.emit(args[1])}]"
            case Call(Symbol("do"), args):
                return self.emit_lines(args)
            case Call(Symbol("if"), args):
                return self._emit_if(form)
            case Call(Symbol("return"), args):
                self._check_arity(form, 0, 1)
                return f"return {self.emit(args[0])}" if args else "return"
            case Call(Symbol("main"), args):
                return self.emit_block("void main()", args)
            case Call(Symbol("defn"), args):
                return self._emit_defn(form)
            case Call(Symbol("import"), args):
                # Resolved by the generation pass
                return ""
            case Call(Symbol(op), args):
                return self._emit_function_call(op, args, form)
        raise MalformedFormError("Unsupported form", form)

    def _emit_postfix_operand(self, form: Node) -> str:
        """Render the operand of a member access or index.

        Both bind tighter than prefix operators, so (.x (++ v)) needs (++v).x.
        """
        text = self.emit(form, nested=True)
        return f"({text})" if _is_prefix_form(form) else text

    def _check_arity(self, form: Call, minimum: int, maximum: int) -> None:
        if not minimum <= len(form.args) <= maximum:
            expected = str(minimum) if minimum == maximum else f"{minimum}-{maximum}"
            raise MalformedFormError(
                f"'{form.name}' expects {expected} operands, got {len(form.args)}", form
            )

    def _emit_infix(self, op: str, form: Call, nested: bool) -> str:
        """Interpose an operator between operands, grouping left to right.

        (- a b c) -> ((a - b) - c)
        """
        operands = [self.emit(arg, nested=True) for arg in form.args]
        if not operands:
            raise MalformedFormError(f"'{form.name}' requires operands", form)
        if len(operands) == 1:
            return operands[0]
        if len(operands) == 2 and not nested:
            return f"{operands[0]} {op} {operands[1]}"

        text = operands[0]
        for operand in operands[1:]:
            text = f"({text} {op} {operand})"
        return text

    def _emit_assignment(self, op: str, form: Call) -> str:
        self._check_arity(form, 1, 2)
        target = self.emit_lvalue(form.args[0])
        if len(form.args) == 1:
            return target
        return f"{target} {op} {self.emit(form.args[1])}"

    def _emit_if(self, form: Call) -> str:
        self._check_arity(form, 2, 3)
        condition, then, *otherwise = form.args
        text = self.emit_block(f"if ({self.emit(condition)})", [then])
        if otherwise:
            text += self.emit_block("else", otherwise)
        return text

    def _emit_params(self, params: Node) -> str:
        match params:
            case Vector(items):
                return ", ".join(self.emit_lvalue(item) for item in items)
            case Empty():
                return ""
            case Call():
                return self.emit_lvalue(params)
        raise MalformedFormError("Invalid parameter list", params)

    def _emit_defn(self, form: Call) -> str:
        if len(form.args) < 3:
            raise MalformedFormError(
                "defn expects a return type, a name and a parameter list", form
            )
        return_type, name, params, *body = form.args
        if not isinstance(name, Symbol):
            raise MalformedFormError("Function name must be a symbol", form)
        header = (
            f"{self.emit_lvalue(return_type)} {glsl_identifier(name.name)}"
            f"({self._emit_params(params)})"
        )
        return self.emit_block(header, body)

    def _emit_function_call(self, op: str, args: Sequence[Node], form: Call) -> str:
        """Transform (a b c d) into a(b, c, d)."""
        name = glsl_identifier(op)
        if self.config.strict_functions and name not in self.known_functions:
            raise UnknownOperatorError(f"Unknown function '{name}'", form)
        return f"{name}({', '.join(self.emit(arg) for arg in args)})"
