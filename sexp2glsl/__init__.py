from sexp2glsl.transpiler import (
    compile_fragment_source,
    compile_program,
    compile_shader,
    compile_vertex_source,
    translate_shader,
)
from sexp2glsl.transpiler.bindings import ChainBindings, DictBindings, ModuleBindings
from sexp2glsl.transpiler.errors import TranspilerError
from sexp2glsl.transpiler.forms import call, kw, sym, to_form, to_source
from sexp2glsl.transpiler.models import ProgramSource, ShaderStage, TranslatorConfig
from sexp2glsl.transpiler.reader import load_program, read, read_one

__version__ = "0.1.0"


__all__ = [
    "compile_fragment_source",
    "compile_program",
    "compile_shader",
    "compile_vertex_source",
    "translate_shader",
    "ChainBindings",
    "DictBindings",
    "ModuleBindings",
    "TranspilerError",
    "call",
    "kw",
    "sym",
    "to_form",
    "to_source",
    "ProgramSource",
    "ShaderStage",
    "TranslatorConfig",
    "load_program",
    "read",
    "read_one",
]
