"""
Constants and predefined values for the shader translator.

This module contains the operator tables used by the emitter and the names of
GLSL built-in functions and type constructors accepted in strict mode.
"""

# Infix operators: form operator -> GLSL operator
INFIX_OPERATORS: dict[str, str] = {
    "+": "+",
    "/": "/",
    "*": "*",
    "=": "==",
    "and": "&&",
    "or": "||",
    "xor": "^^",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
}

# Prefix unary operators
UNARY_OPERATORS: dict[str, str] = {
    "not": "!",
    "++": "++",
    "--": "--",
}

# Assignment-like operators, rendered with the l-value on the left
ASSIGNMENT_OPERATORS: dict[str, str] = {
    "declare": "=",
    "set!": "=",
    "+=": "+=",
    "-=": "-=",
    "*=": "*=",
}

MACRO_FORMS = frozenset({"let", "->"})

GENERATOR_FORMS = frozenset({"import"})

# GLSL type constructors, callable as functions: vec3(1.0, 0.0, 0.0)
TYPE_CONSTRUCTORS = frozenset(
    {
        "float",
        "int",
        "bool",
        "vec2",
        "vec3",
        "vec4",
        "ivec2",
        "ivec3",
        "ivec4",
        "bvec2",
        "bvec3",
        "bvec4",
        "mat2",
        "mat3",
        "mat4",
    }
)

# Built-in GLSL functions, up to the 1.20 fixed-function era
BUILTIN_FUNCTIONS = frozenset(
    {
        # Trigonometric functions
        "radians",
        "degrees",
        "sin",
        "cos",
        "tan",
        "asin",
        "acos",
        "atan",
        # Exponential functions
        "pow",
        "exp",
        "log",
        "exp2",
        "log2",
        "sqrt",
        "inversesqrt",
        # Common functions
        "abs",
        "sign",
        "floor",
        "ceil",
        "fract",
        "mod",
        "min",
        "max",
        "clamp",
        "mix",
        "step",
        "smoothstep",
        # Geometric functions
        "length",
        "distance",
        "dot",
        "cross",
        "normalize",
        "ftransform",
        "faceforward",
        "reflect",
        "refract",
        # Matrix functions
        "matrixCompMult",
        "outerProduct",
        "transpose",
        # Vector relational functions
        "lessThan",
        "lessThanEqual",
        "greaterThan",
        "greaterThanEqual",
        "equal",
        "notEqual",
        "any",
        "all",
        # Texture lookup functions
        "texture1D",
        "texture2D",
        "texture2DProj",
        "texture2DLod",
        "texture3D",
        "textureCube",
        "shadow2D",
        # Fragment processing functions
        "dFdx",
        "dFdy",
        "fwidth",
        # Noise functions
        "noise1",
        "noise2",
        "noise3",
        "noise4",
    }
)
