"""
Binding tables resolved by the ``import`` generator form.

``(import (lighting phong-diffuse))`` looks up ``phong-diffuse`` in the
``lighting`` namespace of a binding table and splices the bound form into the
program, typically a ``defn`` helper used by the shader body.
"""

import importlib
from collections.abc import Mapping
from typing import Any, Protocol

from sexp2glsl.transpiler.errors import (
    InvalidBindingError,
    MissingBindingError,
    TranspilerError,
)
from sexp2glsl.transpiler.forms import Node, to_form
from sexp2glsl.transpiler.reader import read_one


class Bindings(Protocol):
    """Resolves a symbol of a namespace to the form bound to it."""

    def resolve(self, namespace: str, name: str) -> Node: ...


def _bound_form(namespace: str, name: str, value: Any) -> Node:
    """Convert a bound value into a form.

    Strings starting with '(' are read as s-expression text, everything else
    goes through ``to_form``.
    """
    try:
        if isinstance(value, str) and value.lstrip().startswith("("):
            return read_one(value)
        return to_form(value)
    except TranspilerError as e:
        raise InvalidBindingError(namespace, name, e.message) from e


class DictBindings:
    """Bindings backed by a nested ``{namespace: {name: form}}`` mapping."""

    def __init__(self, namespaces: Mapping[str, Mapping[str, Any]]):
        self.namespaces = namespaces

    def resolve(self, namespace: str, name: str) -> Node:
        try:
            value = self.namespaces[namespace][name]
        except KeyError as e:
            raise MissingBindingError(namespace, name) from e
        return _bound_form(namespace, name, value)


class ModuleBindings:
    """Bindings backed by Python modules.

    The namespace is an importable module path and each symbol names a module
    attribute, with hyphens replaced by underscores.
    """

    def resolve(self, namespace: str, name: str) -> Node:
        try:
            module = importlib.import_module(namespace)
        except ImportError as e:
            raise MissingBindingError(namespace, name, str(e)) from e

        attribute = name.replace("-", "_")
        if not hasattr(module, attribute):
            raise MissingBindingError(namespace, name)
        return _bound_form(namespace, name, getattr(module, attribute))


class ChainBindings:
    """Tries several binding tables in order; the first one that resolves wins.

    A symbol that is bound but fails to convert stops the search.
    """

    def __init__(self, *tables: Bindings):
        self.tables = tables

    def resolve(self, namespace: str, name: str) -> Node:
        for table in self.tables:
            try:
                return table.resolve(namespace, name)
            except InvalidBindingError:
                raise
            except MissingBindingError:
                continue
        raise MissingBindingError(namespace, name)
