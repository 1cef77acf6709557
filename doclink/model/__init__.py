"""
Program models: load the declared elements of a program.

This module provides the loading layer that turns a model file into linked
elements (modules, packages, types and their members) for the engines in
``doclink.core``.

Components:
    - ModelLoader: Protocol defining the loader interface
    - JsonModelLoader: Loader for JSON model files
    - ProgramModel: Container for the loaded elements
    - parse_type: Parser for type strings such as ``java.util.List<T>[]``

A model file declares:
    - Modules and packages, with their inclusion flags
    - Types with supertypes, imports, type parameters and documentation
    - Fields, methods and constructors with parameter types and doc tags
"""

from doclink.model.base import ModelLoader
from doclink.model.json_loader import JsonModelLoader, load_model_dict
from doclink.model.models import ProgramModel
from doclink.model.types import parse_type, parse_type_parameters

__all__ = [
    "JsonModelLoader",
    "ModelLoader",
    "ProgramModel",
    "load_model_dict",
    "parse_type",
    "parse_type_parameters",
]
