"""
Core module: element models, exceptions and the resolution engines.

Models (models.py):
    - Element and its subclasses: modules, packages, types, fields, methods
    - TypeRef: A use of a type in a declaration
    - ElementQualities/Deprecation: Results of classification

Exceptions (exceptions.py):
    - DoclinkError: Base exception for all doclink errors
    - ModelError/MalformedModelError: Bad or cyclic program model input
    - InvalidUsageError, SignatureSyntaxError, ElementNotFoundError

Engines:
    - SymbolUniverse: Name lookup, supertypes, overriding
    - ElementClassifier: Exclusion, deprecation and usage indexes
    - SignatureResolver: Reference text to element
    - InheritanceOrder: Ancestor search order
    - InheritedDocResolver: Documentation inherited from ancestors
    - DocSession: All of the above for one loaded model
"""

from doclink.core.classifier import Classification, ElementClassifier
from doclink.core.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog, ResolutionStats
from doclink.core.exceptions import (
    DoclinkError,
    ElementNotFoundError,
    InvalidUsageError,
    MalformedModelError,
    ModelError,
    SignatureSyntaxError,
)
from doclink.core.inheritance import InheritanceOrder, compute_inheritance_order
from doclink.core.inheritdoc import Fragment, InheritedDoc, InheritedDocResolver
from doclink.core.models import (
    Deprecation,
    DocComment,
    Element,
    ElementKind,
    ElementQualities,
    ExecutableElement,
    Modifier,
    ModuleElement,
    PackageElement,
    TypeElement,
    TypeRef,
    VariableElement,
)
from doclink.core.resolver import SignatureResolver
from doclink.core.session import DocSession, MemberCatalogue
from doclink.core.signature import Signature, parse_signature
from doclink.core.universe import SymbolUniverse

__all__ = [
    # Models
    "Element",
    "ElementKind",
    "ModuleElement",
    "PackageElement",
    "TypeElement",
    "VariableElement",
    "ExecutableElement",
    "Modifier",
    "DocComment",
    "TypeRef",
    "Deprecation",
    "ElementQualities",
    # Exceptions
    "DoclinkError",
    "ModelError",
    "MalformedModelError",
    "ElementNotFoundError",
    "InvalidUsageError",
    "SignatureSyntaxError",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "ResolutionStats",
    # Engines
    "SymbolUniverse",
    "ElementClassifier",
    "Classification",
    "Signature",
    "parse_signature",
    "SignatureResolver",
    "InheritanceOrder",
    "compute_inheritance_order",
    "Fragment",
    "InheritedDoc",
    "InheritedDocResolver",
    "DocSession",
    "MemberCatalogue",
]
