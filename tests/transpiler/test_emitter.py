"""Tests for the code emitter module."""

import pytest

from sexp2glsl.transpiler.emitter import (
    Emitter,
    format_literal,
    glsl_identifier,
    keyword_to_builtin,
)
from sexp2glsl.transpiler.errors import MalformedFormError, UnknownOperatorError
from sexp2glsl.transpiler.forms import Literal
from sexp2glsl.transpiler.macros import expand
from sexp2glsl.transpiler.models import TranslatorConfig
from sexp2glsl.transpiler.reader import read, read_one


class TestAtoms:
    """Test emission of symbols, keywords and literals."""

    def test_symbol_hyphens(self, emit):
        assert emit("light-direction") == "light_direction"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("model-view-matrix", "gl_ModelViewMatrix"),
            ("position", "gl_Position"),
            ("frag-color", "gl_FragColor"),
            ("tex-coord", "gl_TexCoord"),
        ],
    )
    def test_keyword_to_builtin(self, name, expected):
        assert keyword_to_builtin(name) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (-3, "-3"),
            (0.5, "0.5"),
            (2.0, "2.0"),
            (1e-05, "1e-05"),
        ],
    )
    def test_literals(self, value, expected):
        assert format_literal(value) == expected

    def test_raw_glsl_text(self, emitter):
        assert emitter.emit(Literal("gl_FragCoord.xy")) == "gl_FragCoord.xy"

    def test_glsl_identifier(self):
        assert glsl_identifier("soft-clamp") == "soft_clamp"

    def test_empty_form(self, emit):
        assert emit("()") == ""

    def test_vector_in_expression_position(self, emit):
        with pytest.raises(MalformedFormError, match="Vector used as an expression"):
            emit("(f [a b])")


class TestOperators:
    """Test infix, unary and member access emission."""

    def test_left_to_right_grouping(self, emit):
        assert emit("(- a b c)") == "((a - b) - c)"
        assert emit("(+ a b c d)") == "(((a + b) + c) + d)"

    def test_binary_at_root_drops_outer_parens(self, emit):
        assert emit("(* x x)") == "x * x"

    def test_nested_operands_keep_parens(self, emit):
        assert emit("(* (+ x 1) 2)") == "(x + 1) * 2"

    def test_threading_then_emission(self, emitter):
        assert emitter.emit(expand(read_one("(-> x (+ 1) (* 2))"))) == "(x + 1) * 2"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("(= a b)", "a == b"),
            ("(and a b)", "a && b"),
            ("(or a b)", "a || b"),
            ("(xor a b)", "a ^^ b"),
            ("(<= a b)", "a <= b"),
            ("(/ a b)", "a / b"),
        ],
    )
    def test_operator_mapping(self, emit, text, expected):
        assert emit(text) == expected

    def test_single_operand(self, emit):
        assert emit("(+ a)") == "a"

    def test_no_operands(self, emit):
        with pytest.raises(MalformedFormError, match="requires operands"):
            emit("(*)")

    def test_negation(self, emit):
        assert emit("(- a)") == "-a"
        assert emit("(- (+ a b))") == "-(a + b)"
        assert emit("(- (- a))") == "-(-a)"

    def test_unary(self, emit):
        assert emit("(not (and a b))") == "!(a && b)"
        assert emit("(++ i)") == "++i"
        assert emit("(-- i)") == "--i"

    def test_unary_arity(self, emit):
        with pytest.raises(MalformedFormError, match="'not' expects 1 operands, got 2"):
            emit("(not a b)")

    def test_member_access(self, emit):
        assert emit("(.xyz position)") == "position.xyz"
        assert emit("(.x (+ a b))") == "(a + b).x"
        assert emit("(.rgb (texture2D tex uv))") == "texture2D(tex, uv).rgb"

    def test_prefix_operand_of_postfix_operator(self, emit):
        assert emit("(.x (++ v))") == "(++v).x"
        assert emit("(.xy (- p))") == "(-p).xy"
        assert emit("(nth (not flags) i)") == "(!flags)[i]"
        assert emit("(.x (- a b))") == "(a - b).x"

    def test_indexing(self, emit):
        assert emit("(nth lights i)") == "lights[i]"
        assert emit("(nth :tex-coord (+ i 1))") == "gl_TexCoord[i + 1]"


class TestFunctionCalls:
    """Test the generic function call fallback."""

    def test_call(self, emit):
        assert emit("(mix a b 0.5)") == "mix(a, b, 0.5)"

    def test_arguments_at_root(self, emit):
        assert emit("(max (dot n l) (+ a b))") == "max(dot(n, l), a + b)"

    def test_unknown_names_pass_through(self, emit):
        assert emit("(my-helper x)") == "my_helper(x)"

    def test_strict_mode_rejects_unknown(self):
        emitter = Emitter(TranslatorConfig(strict_functions=True))
        with pytest.raises(UnknownOperatorError, match="Unknown function 'my_helper'"):
            emitter.emit(read_one("(my-helper x)"))

    def test_strict_mode_accepts_known(self):
        emitter = Emitter(
            TranslatorConfig(
                strict_functions=True, extra_functions=frozenset({"sample_sky"})
            ),
            known_functions=["my-helper"],
        )
        assert emitter.emit(read_one("(vec4 (normalize n) 1.0)")) == (
            "vec4(normalize(n), 1.0)"
        )
        assert emitter.emit(read_one("(my-helper x)")) == "my_helper(x)"
        assert emitter.emit(read_one("(sample_sky d)")) == "sample_sky(d)"


class TestAssignments:
    """Test assignment and declaration emission."""

    def test_set(self, emit):
        assert emit("(set! color (* a b))") == "color = a * b"

    def test_compound_assignment(self, emit):
        assert emit("(+= total x)") == "total += x"
        assert emit("(-= total x)") == "total -= x"
        assert emit("(*= total x)") == "total *= x"

    def test_typed_lvalue(self, emit):
        assert emit("(set! (float d) (length p))") == "float d = length(p)"

    def test_builtin_lvalue(self, emit):
        assert emit("(set! :frag-color c)") == "gl_FragColor = c"

    def test_swizzle_lvalue(self, emit):
        assert emit("(set! (.xyz color) n)") == "color.xyz = n"
        assert emit("(set! (.xy :position) p)") == "gl_Position.xy = p"

    def test_bare_declaration(self, emit):
        assert emit("(declare (uniform vec3 light-pos))") == "uniform vec3 light_pos"
        assert emit("(declare [varying vec2 uv])") == "varying vec2 uv"

    def test_declaration_with_initializer(self, emit):
        assert emit("(declare (const float pi) 3.14159)") == "const float pi = 3.14159"

    def test_assignment_arity(self, emit):
        with pytest.raises(MalformedFormError, match="'set!' expects 1-2 operands"):
            emit("(set! a b c)")


class TestStatements:
    """Test statement lists and blocks."""

    def test_do(self, emit):
        assert emit("(do (set! a 1) (set! b 2) (return a))") == (
            "a = 1;\nb = 2;\nreturn a;\n"
        )

    def test_let_matches_do(self, emit):
        let_form = expand(read_one("(let [a 1 b 2] (return a))"))
        do_form = read_one("(do (set! a 1) (set! b 2) (return a))")
        assert let_form == do_form
        assert emit("(do (set! a 1) (set! b 2) (return a))") == (
            "a = 1;\nb = 2;\nreturn a;\n"
        )

    def test_blank_statements_dropped(self, emitter):
        forms = read("(set! a 1) () (import (lib f)) (do) (return a)")
        assert emitter.emit_lines(forms) == "a = 1;\nreturn a;\n"

    def test_nested_do_not_double_terminated(self, emit):
        assert emit("(do (do (set! a 1)) (set! b 2))") == "a = 1;\nb = 2;\n"

    def test_return(self, emit):
        assert emit("(return)") == "return"
        assert emit("(return (* x x))") == "return x * x"

    def test_if(self, emit):
        assert emit("(if (< d 0.5) discard)") == (
            "if (d < 0.5)\n{\n  discard;\n}\n"
        )

    def test_if_else(self, emit):
        expected = """\
if (lit)
{
  color = diffuse;
  alpha = 1.0;
}
else
{
  color = ambient;
}
"""
        assert (
            emit(
                "(if lit (do (set! color diffuse) (set! alpha 1.0))"
                " (set! color ambient))"
            )
            == expected
        )

    def test_nested_if_indentation(self, emit):
        expected = """\
if (a)
{
  if (b)
  {
    x = 1;
  }
}
"""
        assert emit("(if a (if b (set! x 1)))") == expected

    def test_if_arity(self, emit):
        with pytest.raises(MalformedFormError, match="'if' expects 2-3 operands"):
            emit("(if a)")

    def test_empty_block(self, emit):
        assert emit("(main)") == "void main()\n{\n}\n"

    def test_custom_indent(self):
        emitter = Emitter(TranslatorConfig(indent="    "))
        assert emitter.emit(read_one("(main (set! a 1))")) == (
            "void main()\n{\n    a = 1;\n}\n"
        )


class TestFunctions:
    """Test main and defn emission."""

    def test_main(self, emit):
        assert emit("(main (set! :frag-color (vec4 1.0 0.0 0.0 1.0)))") == (
            "void main()\n{\n  gl_FragColor = vec4(1.0, 0.0, 0.0, 1.0);\n}\n"
        )

    def test_defn_single_parameter(self, emit):
        expected = """\
float square(float x)
{
  return x * x;
}
"""
        assert emit("(defn float square (float x) (return (* x x)))") == expected

    def test_defn_parameter_vector(self, emit):
        expected = """\
vec3 soft_light(vec3 base, in vec3 blend, float amount)
{
  vec3 mixed = mix(base, blend, amount);
  return mixed;
}
"""
        source = (
            "(defn vec3 soft-light [(vec3 base) (in vec3 blend) (float amount)]"
            " (set! (vec3 mixed) (mix base blend amount))"
            " (return mixed))"
        )
        assert emit(source) == expected

    def test_defn_without_parameters(self, emit):
        assert emit("(defn void noop ())") == "void noop()\n{\n}\n"
        assert emit("(defn float one [] (return 1.0))") == (
            "float one()\n{\n  return 1.0;\n}\n"
        )

    def test_defn_arity(self, emit):
        with pytest.raises(MalformedFormError, match="return type, a name"):
            emit("(defn float square)")


def test_declarations(emitter):
    """Test rendering of a declaration section."""
    declarations = read("[uniform float time] (attribute vec3 offset) [vec3 normal]")
    assert emitter.emit_declarations(declarations) == (
        "uniform float time;\nattribute vec3 offset;\nvec3 normal;\n"
    )


def test_emission_is_deterministic(emitter):
    """Test that emitting the same tree twice yields identical text."""
    form = read_one("(main (if (> (.x p) 0.0) (set! c (- a b c)) discard))")
    assert emitter.emit(form) == emitter.emit(form)
