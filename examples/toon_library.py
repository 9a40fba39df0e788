"""Toon Shading With an Imported Helper Library

This example builds a program from Python data instead of a .sx file and
resolves its helper functions from this module through ``import`` forms.

Key concepts demonstrated:
1. Declarations and bodies written as tuples and lists
2. Helper functions bound as module attributes (``band-lighting`` is looked
   up as ``band_lighting``)
3. Transitive imports: ``band-lighting`` imports ``lambert``
4. Strict function checking accepting the imported helpers

To run this example:
    python examples/toon_library.py
"""

from sexp2glsl import ModuleBindings, TranslatorConfig, compile_program

lambert = """
(defn float lambert [(vec3 n) (vec3 l)]
  (return (max (dot n l) 0.0)))
"""

band_lighting = """
(defn float band-lighting [(vec3 n) (vec3 l) (float bands)]
  (import (toon_library lambert))
  (return (/ (floor (* (lambert n l) bands)) bands)))
"""

DECLARATIONS = [
    ["uniform", "vec3", "light-direction"],
    ["uniform", "vec3", "base-color"],
    ["varying", "vec3", "normal"],
]

VERTEX = [
    ("set!", "normal", ("normalize", ("*", ":normal-matrix", ":normal"))),
    ("set!", ":position", ("ftransform",)),
]

FRAGMENT = """
(import (toon_library band-lighting))
(set! :frag-color
      (vec4 (* base-color (band-lighting normal light-direction 4.0)) 1.0))
"""


if __name__ == "__main__":
    import sys

    sys.modules.setdefault("toon_library", sys.modules[__name__])

    sources = compile_program(
        DECLARATIONS,
        VERTEX,
        FRAGMENT,
        bindings=ModuleBindings(),
        config=TranslatorConfig(version="120", strict_functions=True),
    )
    print(sources.vertex_source)
    print(sources.fragment_source)
