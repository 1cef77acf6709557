"""Data models for Doclink."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum

OBJECT_TYPE_NAME = "java.lang.Object"
CONSTRUCTOR_NAME = "<init>"

PRIMITIVE_NAMES = frozenset(
    {"boolean", "byte", "char", "short", "int", "long", "float", "double"}
)

_FIRST_SENTENCE = re.compile(r"^(.*?\.)(?:\s|$)", re.DOTALL)


class ElementKind(Enum):
    """Kinds of program elements that can be documented."""

    MODULE = "module"
    PACKAGE = "package"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION_TYPE = "annotation"
    FIELD = "field"
    ENUM_CONSTANT = "enum_constant"
    METHOD = "method"
    CONSTRUCTOR = "constructor"

    @property
    def is_type(self) -> bool:
        return self in _TYPE_KINDS

    @property
    def is_variable(self) -> bool:
        return self in (ElementKind.FIELD, ElementKind.ENUM_CONSTANT)

    @property
    def is_executable(self) -> bool:
        return self in (ElementKind.METHOD, ElementKind.CONSTRUCTOR)

    @property
    def is_member(self) -> bool:
        return self.is_variable or self.is_executable


_TYPE_KINDS = frozenset(
    {ElementKind.CLASS, ElementKind.INTERFACE, ElementKind.ENUM, ElementKind.ANNOTATION_TYPE}
)


class Modifier(Enum):
    """Declaration modifiers."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    STATIC = "static"
    FINAL = "final"
    ABSTRACT = "abstract"
    DEFAULT = "default"
    SEALED = "sealed"
    NATIVE = "native"
    SYNCHRONIZED = "synchronized"
    TRANSIENT = "transient"
    VOLATILE = "volatile"
    STRICTFP = "strictfp"


class TypeKind(Enum):
    """Kinds of type uses."""

    PRIMITIVE = "primitive"
    VOID = "void"
    DECLARED = "declared"
    TYPEVAR = "typevar"
    NONE = "none"


@dataclass(frozen=True)
class TypeRef:
    """A use of a type: a field type, parameter type, return type or supertype."""

    kind: TypeKind
    name: str
    dims: int = 0
    args: tuple[TypeRef, ...] = ()
    bound: TypeRef | None = None

    @classmethod
    def declared(cls, name: str, dims: int = 0) -> TypeRef:
        return cls(TypeKind.DECLARED, name, dims)

    @classmethod
    def primitive(cls, name: str, dims: int = 0) -> TypeRef:
        return cls(TypeKind.PRIMITIVE, name, dims)

    @property
    def is_array(self) -> bool:
        return self.dims > 0

    def erasure(self) -> TypeRef:
        """Drop generic arguments and replace type variables by their bound."""
        if self.kind == TypeKind.TYPEVAR:
            base = self.bound.erasure() if self.bound else TypeRef.declared(OBJECT_TYPE_NAME)
            return replace(base, dims=base.dims + self.dims)
        if not self.args and self.bound is None:
            return self
        return TypeRef(self.kind, self.name, self.dims)

    def component(self) -> TypeRef:
        """Strip every array dimension."""
        return replace(self, dims=0) if self.dims else self

    def array_of(self, extra: int = 1) -> TypeRef:
        return replace(self, dims=self.dims + extra)

    def __str__(self) -> str:
        text = self.name
        if self.args:
            text += "<" + ",".join(str(a) for a in self.args) + ">"
        return text + "[]" * self.dims


@dataclass(frozen=True)
class BlockTag:
    """A block tag from a documentation comment, e.g. ``@param x the value``.

    ``name`` holds the tag's leading argument where the tag kind has one: the
    parameter name of ``@param`` and the exception signature of ``@throws``.
    """

    kind: str
    text: str = ""
    name: str | None = None


@dataclass(frozen=True)
class DocComment:
    """Structured access to an element's documentation comment."""

    body: str = ""
    tags: tuple[BlockTag, ...] = ()
    first_sentence_text: str | None = None

    @property
    def first_sentence(self) -> str:
        if self.first_sentence_text is not None:
            return self.first_sentence_text
        text = self.body.strip()
        m = _FIRST_SENTENCE.match(text)
        return m.group(1).strip() if m else text

    def tags_of(self, *kinds: str) -> Iterator[BlockTag]:
        """Iterate over block tags of the given kinds, in declaration order."""
        for tag in self.tags:
            if tag.kind in kinds:
                yield tag

    def first_tag(self, *kinds: str) -> BlockTag | None:
        return next(self.tags_of(*kinds), None)

    def has_tag(self, *kinds: str) -> bool:
        return self.first_tag(*kinds) is not None


@dataclass(eq=False)
class Element:
    """A declared program element.

    Elements compare and hash by identity so they can key side tables.
    """

    id: int
    name: str
    qualified_name: str
    kind: ElementKind
    modifiers: frozenset[Modifier] = frozenset()
    enclosing: Element | None = None
    doc: DocComment | None = None
    annotations: tuple[str, ...] = ()
    included: bool = True
    members: list[Element] = field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    @property
    def is_protected(self) -> bool:
        return Modifier.PROTECTED in self.modifiers

    @property
    def is_private(self) -> bool:
        return Modifier.PRIVATE in self.modifiers

    @property
    def is_static(self) -> bool:
        return Modifier.STATIC in self.modifiers

    @property
    def is_visible(self) -> bool:
        """Whether the element appears in published documentation."""
        return self.is_public or self.is_protected

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value} {self.qualified_name})"


@dataclass(eq=False, repr=False)
class ModuleElement(Element):
    """A module."""


@dataclass(eq=False, repr=False)
class PackageElement(Element):
    """A package; ``imports`` are those of its package-level declarations file."""

    imports: tuple[str, ...] = ()

    @property
    def module(self) -> ModuleElement | None:
        return self.enclosing if isinstance(self.enclosing, ModuleElement) else None


@dataclass(eq=False, repr=False)
class TypeElement(Element):
    """A class, interface, enum or annotation type."""

    superclass: TypeRef | None = None
    interfaces: tuple[TypeRef, ...] = ()
    type_parameters: dict[str, TypeRef | None] = field(default_factory=dict)
    imports: tuple[str, ...] = ()

    def as_type(self) -> TypeRef:
        return TypeRef.declared(self.qualified_name)


@dataclass(eq=False, repr=False)
class VariableElement(Element):
    """A field or enum constant."""

    type: TypeRef = field(default_factory=lambda: TypeRef(TypeKind.NONE, "<none>"))
    constant_value: object | None = None


@dataclass(frozen=True)
class Parameter:
    """A formal parameter of a method or constructor."""

    name: str
    type: TypeRef


@dataclass(eq=False, repr=False)
class ExecutableElement(Element):
    """A method or constructor."""

    parameters: tuple[Parameter, ...] = ()
    return_type: TypeRef | None = None
    thrown: tuple[TypeRef, ...] = ()
    varargs: bool = False
    type_parameters: dict[str, TypeRef | None] = field(default_factory=dict)

    def erased_parameter_types(self) -> tuple[TypeRef, ...]:
        return tuple(p.type.erasure() for p in self.parameters)


class Deprecation(Enum):
    """Deprecation state of an element, weakest first."""

    NONE = 0
    IMPLIED = 1
    MARKED = 2
    ADVISED = 3

    @property
    def is_deprecated(self) -> bool:
        return self is not Deprecation.NONE

    @property
    def is_explicit(self) -> bool:
        return self in (Deprecation.MARKED, Deprecation.ADVISED)


@dataclass(frozen=True)
class ElementQualities:
    """Classifier results for one element."""

    excluded: bool = False
    deprecation: Deprecation = Deprecation.NONE
    causes: frozenset[Element] = frozenset()

    def __repr__(self) -> str:
        flags = []
        if self.excluded:
            flags.append("excluded")
        if self.deprecation.is_deprecated:
            flags.append(f"deprecated={self.deprecation.name.lower()}")
        return f"ElementQualities({', '.join(flags) or 'plain'})"
