"""
Pytest configuration and shared fixtures for translator tests.

This module contains fixtures that are shared across multiple test modules.
"""

import pytest

from sexp2glsl.transpiler.bindings import DictBindings
from sexp2glsl.transpiler.emitter import Emitter
from sexp2glsl.transpiler.models import TranslatorConfig
from sexp2glsl.transpiler.reader import read_one


@pytest.fixture
def config():
    """Fixture providing the default translator configuration."""
    return TranslatorConfig()


@pytest.fixture
def emitter(config):
    """Fixture providing an emitter with the default configuration."""
    return Emitter(config)


@pytest.fixture
def emit(emitter):
    """Fixture rendering s-expression text as a root expression."""

    def _emit(text: str) -> str:
        return emitter.emit(read_one(text))

    return _emit


@pytest.fixture
def lighting_bindings():
    """Fixture providing a small library of helper functions."""
    return DictBindings(
        {
            "lighting": {
                "lambert": (
                    "(defn float lambert [(vec3 normal) (vec3 light)]"
                    " (return (max (dot normal light) 0.0)))"
                ),
                "half-lambert": (
                    "(defn float half-lambert [(vec3 normal) (vec3 light)]"
                    " (import (lighting lambert))"
                    " (return (+ (* (lambert normal light) 0.5) 0.5)))"
                ),
            },
            "math": {
                "square": (
                    "defn",
                    "float",
                    "square",
                    ("float", "x"),
                    ("return", ("*", "x", "x")),
                ),
            },
        }
    )
