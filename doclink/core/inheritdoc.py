"""Inherited documentation: find docs an element lacks in its ancestors.

Each lookup comes in two forms. ``find_*`` returns an ``InheritedDoc``
naming the element that supplied the text, or None. ``write_*`` passes the
text to a sink and returns whether anything was found.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

from doclink.core.exceptions import InvalidUsageError
from doclink.core.inheritance import InheritanceOrder
from doclink.core.models import (
    BlockTag,
    Element,
    ElementKind,
    ExecutableElement,
    TypeElement,
)
from doclink.core.resolver import SignatureResolver
from doclink.core.universe import SymbolUniverse

logger = logging.getLogger(__name__)

TextSink = Callable[[str], None]

ENUM_VALUE_OF_TEXT = "Returns the enum constant of this type with the specified name."
ENUM_VALUE_OF_RETURN_TEXT = "the enum constant with the specified name"
ENUM_VALUE_OF_PARAM_TEXT = "the name of the enum constant to be returned"
ENUM_VALUES_TEXT = (
    "Returns an array containing the constants of this enum type, "
    "in the order they are declared."
)
ENUM_VALUES_RETURN_TEXT = (
    "an array containing the constants of this enum type, in the order they are declared"
)
DEFAULT_CONSTRUCTOR_TEXT = "Creates a new instance with default settings."
UNSPECIFIED_TEXT = "No description provided."


class Fragment(Enum):
    """Part of an element's documentation."""

    WHOLE = "whole"
    PARAMETER = "parameter"
    RETURN = "return"
    THROWS = "throws"


@dataclass(frozen=True)
class InheritedDoc:
    """Documentation text and the element it was taken from."""

    source: Element
    text: str


class InheritedDocResolver:
    """Search ancestors and overridden methods for missing documentation."""

    def __init__(
        self,
        universe: SymbolUniverse,
        order: InheritanceOrder,
        resolver: SignatureResolver,
    ) -> None:
        self.universe = universe
        self.order = order
        self.resolver = resolver
        self.config = universe.config
        self.diagnostics = universe.diagnostics

    # Walks

    def _ensure_instance_method(self, element: Element) -> ExecutableElement:
        if element.kind != ElementKind.METHOD or element.is_static:
            raise InvalidUsageError(
                f"{element.qualified_name} is not an instance method and cannot inherit docs"
            )
        return element

    def _overridden(self, method: ExecutableElement) -> Iterator[tuple[TypeElement, ExecutableElement]]:
        """Every method ``method`` overrides, ancestor by ancestor in inheritance order."""
        owner = method.enclosing
        if not isinstance(owner, TypeElement):
            return
        for ancestor in self.order.get(owner):
            for candidate in self.universe.methods_in(ancestor):
                if self.universe.overrides(method, candidate, owner):
                    yield ancestor, candidate

    def _first_overridden(self, method: ExecutableElement) -> Iterator[ExecutableElement]:
        """The first overridden method found in each ancestor."""
        last: TypeElement | None = None
        for ancestor, candidate in self._overridden(method):
            if ancestor is not last:
                last = ancestor
                yield candidate

    # Summaries

    def direct_summary(self, element: Element) -> InheritedDoc | None:
        """The element's own summary: a summary tag, else its first sentence."""
        doc = element.doc
        if doc is None:
            return None
        for tag in doc.tags_of(*self.config.summary_tags):
            if tag.text.strip():
                return InheritedDoc(element, tag.text.strip())
        sentence = doc.first_sentence.strip()
        return InheritedDoc(element, sentence) if sentence else None

    def find_inherited_summary(self, element: Element) -> InheritedDoc | None:
        """The nearest ancestor's direct summary.

        Types search their inheritance order. Instance methods take the first
        overridden method of each ancestor type and use its direct summary
        when it has one. Other elements inherit nothing.
        """
        if isinstance(element, TypeElement):
            for ancestor in self.order.get(element):
                found = self.direct_summary(ancestor)
                if found is not None:
                    return found
            return None
        if element.kind == ElementKind.METHOD and not element.is_static:
            for candidate in self._first_overridden(element):
                found = self.direct_summary(candidate)
                if found is not None:
                    return found
        return None

    def find_summary(self, element: Element) -> InheritedDoc | None:
        return self.direct_summary(element) or self.find_inherited_summary(element)

    def write_summary(self, sink: TextSink, element: Element) -> bool:
        return _emit(sink, self.find_summary(element))

    def write_inherited_summary(self, sink: TextSink, element: Element) -> bool:
        return _emit(sink, self.find_inherited_summary(element))

    # Fragments

    def parameter_doc(self, method: Element, position: int) -> BlockTag | None:
        """The ``@param`` tag documenting the parameter at ``position``."""
        if not method.kind.is_executable:
            raise InvalidUsageError(f"{method.qualified_name} is not a method or constructor")
        if position < 0 or position >= len(method.parameters):
            raise InvalidUsageError(
                f"{method.qualified_name} has no parameter at position {position}"
            )
        if method.doc is None:
            return None
        name = method.parameters[position].name
        for tag in method.doc.tags_of("param"):
            if tag.name == name:
                return tag
        return None

    def find_param(self, method: Element, position: int) -> InheritedDoc | None:
        """Parameter docs from overridden methods, matched by position."""
        method = self._ensure_instance_method(method)
        if position < 0 or position >= len(method.parameters):
            raise InvalidUsageError(
                f"{method.qualified_name} has no parameter at position {position}"
            )
        for _, candidate in self._overridden(method):
            tag = self.parameter_doc(candidate, position)
            if tag is not None and tag.text.strip():
                return InheritedDoc(candidate, tag.text.strip())
        return None

    def write_inherited_param(self, sink: TextSink, method: Element, position: int) -> bool:
        return _emit(sink, self.find_param(method, position))

    def find_return(self, method: Element) -> InheritedDoc | None:
        method = self._ensure_instance_method(method)
        for _, candidate in self._overridden(method):
            if candidate.doc is None:
                continue
            tag = candidate.doc.first_tag("return")
            if tag is not None and tag.text.strip():
                return InheritedDoc(candidate, tag.text.strip())
        return None

    def write_inherited_return(self, sink: TextSink, method: Element) -> bool:
        return _emit(sink, self.find_return(method))

    def throws_doc(self, method: Element, thrown: TypeElement) -> BlockTag | None:
        """The most specific ``@throws`` tag of ``method`` that covers ``thrown``.

        Tag names are resolved as references from ``method``. Only classes
        count, and a tag covers ``thrown`` when ``thrown`` is the named class
        or one of its subtypes.
        """
        if not method.kind.is_executable:
            raise InvalidUsageError(f"{method.qualified_name} is not a method or constructor")
        if method.doc is None:
            return None
        best: BlockTag | None = None
        best_type: TypeElement | None = None
        for tag in method.doc.tags_of("throws", "exception"):
            if not tag.name:
                continue
            named = self.resolver.resolve_signature(method, tag.name)
            if not isinstance(named, TypeElement) or named.kind != ElementKind.CLASS:
                continue
            if not self.universe.is_subtype(thrown, named):
                continue
            if best_type is None or self.universe.is_subtype(named, best_type):
                best, best_type = tag, named
        return best

    def find_throws(self, method: Element, thrown: TypeElement) -> InheritedDoc | None:
        method = self._ensure_instance_method(method)
        for _, candidate in self._overridden(method):
            tag = self.throws_doc(candidate, thrown)
            if tag is not None and tag.text.strip():
                return InheritedDoc(candidate, tag.text.strip())
        return None

    def write_inherited_throws(
        self, sink: TextSink, method: Element, thrown: TypeElement
    ) -> bool:
        return _emit(sink, self.find_throws(method, thrown))

    # Body

    def find_body(self, element: Element, first_sentence: bool = False) -> InheritedDoc | None:
        """Body text from the first ancestor type, or overridden method, that has any."""
        if isinstance(element, TypeElement):
            candidates: Iterator[Element] = iter(self.order.get(element))
        elif element.kind == ElementKind.METHOD and not element.is_static:
            candidates = (c for _, c in self._overridden(element))
        else:
            return None
        for candidate in candidates:
            if candidate.doc is None:
                continue
            text = candidate.doc.first_sentence if first_sentence else candidate.doc.body
            if text.strip():
                return InheritedDoc(candidate, text.strip())
        return None

    def write_inherited_body(
        self, sink: TextSink, element: Element, first_sentence: bool = False
    ) -> bool:
        return _emit(sink, self.find_body(element, first_sentence))

    # Fallbacks

    def synthetic_description(
        self, element: Element, fragment: Fragment = Fragment.WHOLE
    ) -> str:
        """Fixed text for generated members, or the generic placeholder.

        Elements that get the placeholder are recorded as undocumented.
        """
        universe = self.universe
        if universe.is_enum_value_of(element):
            if fragment == Fragment.WHOLE:
                return ENUM_VALUE_OF_TEXT
            if fragment == Fragment.RETURN:
                return ENUM_VALUE_OF_RETURN_TEXT
            if fragment == Fragment.PARAMETER:
                return ENUM_VALUE_OF_PARAM_TEXT
        elif universe.is_enum_values(element):
            if fragment == Fragment.WHOLE:
                return ENUM_VALUES_TEXT
            if fragment == Fragment.RETURN:
                return ENUM_VALUES_RETURN_TEXT
        elif element.kind == ElementKind.CONSTRUCTOR and not element.parameters:
            return DEFAULT_CONSTRUCTOR_TEXT

        self.diagnostics.mark_undocumented(element)
        return UNSPECIFIED_TEXT

    @property
    def undocumented_elements(self) -> frozenset[Element]:
        return self.diagnostics.undocumented_elements


def _emit(sink: TextSink, found: InheritedDoc | None) -> bool:
    if found is None:
        return False
    sink(found.text)
    return True
