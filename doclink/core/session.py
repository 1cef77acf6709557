"""DocSession: one loaded program model with every engine wired up."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from doclink.config import ResolverConfig
from doclink.core.classifier import Classification, ElementClassifier
from doclink.core.diagnostics import DiagnosticLog
from doclink.core.exceptions import ElementNotFoundError, ModelError
from doclink.core.inheritance import InheritanceOrder
from doclink.core.inheritdoc import Fragment, InheritedDoc, InheritedDocResolver, TextSink
from doclink.core.models import Element, ElementKind, ElementQualities, Modifier, TypeElement
from doclink.core.resolver import SignatureResolver
from doclink.core.universe import SymbolUniverse
from doclink.model.base import ModelLoader
from doclink.model.models import ProgramModel

logger = logging.getLogger(__name__)


@dataclass
class MemberCatalogue:
    """Visible, non-excluded members of a type, declared and inherited, by category."""

    static_types: list[Element] = field(default_factory=list)
    inner_types: list[Element] = field(default_factory=list)
    constants: list[Element] = field(default_factory=list)
    static_fields: list[Element] = field(default_factory=list)
    instance_fields: list[Element] = field(default_factory=list)
    constructors: list[Element] = field(default_factory=list)
    static_methods: list[Element] = field(default_factory=list)
    instance_methods: list[Element] = field(default_factory=list)

    def sections(self) -> dict[str, list[Element]]:
        return {name: list(value) for name, value in vars(self).items()}


class DocSession:
    """Facade over the universe, classifier and resolvers for one program model."""

    def __init__(
        self,
        model: ProgramModel,
        config: ResolverConfig | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.diagnostics = diagnostics or DiagnosticLog()
        self.universe = SymbolUniverse(model, self.config, self.diagnostics)
        self.classification: Classification = ElementClassifier(self.universe).classify()
        self.order = InheritanceOrder(self.universe)
        self.resolver = SignatureResolver(self.universe)
        self.docs = InheritedDocResolver(self.universe, self.order, self.resolver)

    @classmethod
    def from_file(
        cls,
        path: Path,
        config: ResolverConfig | None = None,
        loader: ModelLoader | None = None,
    ) -> DocSession:
        """Load a program model (JSON by default) and build a session over it."""
        if loader is None:
            from doclink.model.json_loader import JsonModelLoader

            loader = JsonModelLoader()
        if not loader.supports(path):
            raise ModelError(f"Unsupported program model file: {path}")
        model = loader.load(path)
        logger.info("Loaded %r from %s", model, path)
        return cls(model, config)

    # Resolution

    def resolve_signature(self, context: Element | None, text: str) -> Element | None:
        return self.resolver.resolve_signature(context, text)

    def require(self, text: str, context: Element | None = None) -> Element:
        """Resolve a reference or raise ElementNotFoundError."""
        found = self.resolve_signature(context, text)
        if found is None:
            raise ElementNotFoundError(f"No element matches {text!r}")
        return found

    def require_type(self, text: str, context: Element | None = None) -> TypeElement:
        found = self.require(text, context)
        if not isinstance(found, TypeElement):
            raise ElementNotFoundError(f"{text!r} is a {found.kind.value}, not a type")
        return found

    def get_inheritance_order(self, t: TypeElement) -> tuple[TypeElement, ...]:
        return self.order.get(t)

    # Inherited documentation

    def write_inherited_summary(self, sink: TextSink, element: Element) -> bool:
        return self.docs.write_inherited_summary(sink, element)

    def write_inherited_param(self, sink: TextSink, method: Element, position: int) -> bool:
        return self.docs.write_inherited_param(sink, method, position)

    def write_inherited_return(self, sink: TextSink, method: Element) -> bool:
        return self.docs.write_inherited_return(sink, method)

    def write_inherited_throws(self, sink: TextSink, method: Element, thrown: TypeElement) -> bool:
        return self.docs.write_inherited_throws(sink, method, thrown)

    def summary_or_synthetic(self, element: Element) -> InheritedDoc:
        """The element's summary, inherited if need be, else a synthetic one."""
        found = self.docs.find_summary(element)
        if found is not None:
            return found
        return InheritedDoc(element, self.docs.synthetic_description(element, Fragment.WHOLE))

    # Classification

    def get_qualities(self, element: Element) -> ElementQualities | None:
        return self.classification.get_qualities(element)

    @property
    def producers(self):
        return self.classification.producers

    @property
    def consumers(self):
        return self.classification.consumers

    @property
    def transformers(self):
        return self.classification.transformers

    @property
    def pseudo_constructors(self):
        return self.classification.pseudo_constructors

    @property
    def known_subtypes(self):
        return self.classification.known_subtypes

    @property
    def known_direct_subtypes(self):
        return self.classification.known_direct_subtypes

    def member_catalogue(self, t: TypeElement) -> MemberCatalogue:
        catalogue = MemberCatalogue()
        for member in self.universe.get_all_members(t):
            if not member.is_visible or self.classification.is_excluded(member):
                continue
            if member.kind.is_type:
                (catalogue.static_types if member.is_static else catalogue.inner_types).append(
                    member
                )
            elif member.kind == ElementKind.ENUM_CONSTANT:
                catalogue.constants.append(member)
            elif member.kind == ElementKind.FIELD:
                if member.is_static and Modifier.FINAL in member.modifiers:
                    catalogue.constants.append(member)
                elif member.is_static:
                    catalogue.static_fields.append(member)
                else:
                    catalogue.instance_fields.append(member)
            elif member.kind == ElementKind.CONSTRUCTOR:
                catalogue.constructors.append(member)
            elif member.kind == ElementKind.METHOD:
                (catalogue.static_methods if member.is_static else catalogue.instance_methods).append(
                    member
                )
        return catalogue

    # Reporting

    def undocumented_report(self) -> list[Element]:
        """Classified, non-excluded elements with no summary of their own or inherited.

        Each one found is recorded in the diagnostics log.
        """
        missing: list[Element] = []
        for element, q in self.classification.qualities.items():
            if q.excluded:
                continue
            if self.docs.find_summary(element) is not None:
                continue
            self.docs.synthetic_description(element, Fragment.WHOLE)
            if element in self.diagnostics.undocumented_elements:
                missing.append(element)
        return sorted(missing, key=lambda e: e.qualified_name)

    def __repr__(self) -> str:
        return f"DocSession({self.universe!r}, diagnostics={len(self.diagnostics)})"
