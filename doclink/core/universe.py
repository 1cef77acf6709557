"""Symbol universe: queryable database of every declared element."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import replace
from typing import TYPE_CHECKING

from doclink.config import ResolverConfig
from doclink.core.diagnostics import DiagnosticKind, DiagnosticLog
from doclink.core.graph import ElementGraph, RelationKind
from doclink.core.graph.traversal import supertype_closure
from doclink.core.inheritance import compute_inheritance_order
from doclink.core.models import (
    Element,
    ElementKind,
    ExecutableElement,
    ModuleElement,
    PackageElement,
    TypeElement,
    TypeKind,
    TypeRef,
    VariableElement,
)

if TYPE_CHECKING:
    from doclink.model.models import ProgramModel

logger = logging.getLogger(__name__)


class SymbolUniverse:
    """Read-only view over a program model.

    Supertype edges are resolved once at construction. Unknown supertypes
    (declarations outside the model, such as platform classes) are dropped.
    """

    def __init__(
        self,
        model: ProgramModel,
        config: ResolverConfig | None = None,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.model = model
        self.config = config or ResolverConfig()
        self.diagnostics = diagnostics or DiagnosticLog()

        self._modules: dict[str, ModuleElement] = {m.qualified_name: m for m in model.modules}
        self._types: dict[str, list[TypeElement]] = defaultdict(list)
        self._packages: dict[str, list[PackageElement]] = defaultdict(list)
        for t in model.types:
            self._types[t.qualified_name].append(t)
        for p in model.packages:
            self._packages[p.qualified_name].append(p)

        self._superclass: dict[int, TypeElement] = {}
        self._interfaces: dict[int, list[TypeElement]] = {}
        self._graph = ElementGraph()
        for t in model.types:
            self._link_supertypes(t)
        self._closures: dict[int, tuple[TypeElement, ...]] = {}

        logger.debug(
            "Universe built: %d modules, %d packages, %d types",
            len(model.modules),
            len(model.packages),
            len(model.types),
        )

    def _link_supertypes(self, t: TypeElement) -> None:
        self._graph.add_element(t)
        interfaces: list[TypeElement] = []
        if t.superclass is not None:
            sup = self.as_element(t.superclass, t)
            if sup is not None:
                self._superclass[t.id] = sup
                self._graph.add_relation(t, sup, RelationKind.EXTENDS)
        for ref in t.interfaces:
            iface = self.as_element(ref, t)
            if iface is not None:
                interfaces.append(iface)
                self._graph.add_relation(t, iface, RelationKind.IMPLEMENTS)
        self._interfaces[t.id] = interfaces

    # Lookups

    @property
    def supertype_graph(self) -> ElementGraph:
        """Graph with an EXTENDS or IMPLEMENTS edge from each type to its direct supertypes."""
        return self._graph

    @property
    def modules(self) -> list[ModuleElement]:
        return self.model.modules

    @property
    def packages(self) -> list[PackageElement]:
        return self.model.packages

    @property
    def types(self) -> list[TypeElement]:
        return self.model.types

    def elements(self) -> Iterator[Element]:
        return self.model.elements()

    def find_module(self, name: str) -> ModuleElement | None:
        return self._modules.get(name)

    def find_types(
        self, module_ctx: ModuleElement | None, name: str, origin: Element | None = None
    ) -> list[TypeElement]:
        """All candidates for a qualified type name, preferred first.

        A match in ``module_ctx`` is returned alone. Otherwise every type with
        that name is a candidate, and more than one is reported as ambiguous.
        """
        candidates = self._types.get(name, [])
        if module_ctx is not None:
            for cand in candidates:
                if self.get_module_of(cand) is module_ctx:
                    return [cand]
        if len(candidates) > 1:
            candidates = self._order_candidates(candidates)
            self._report_ambiguity(DiagnosticKind.AMBIGUOUS_TYPE, name, candidates, origin)
        return list(candidates)

    def find_type(
        self, module_ctx: ModuleElement | None, name: str, origin: Element | None = None
    ) -> TypeElement | None:
        found = self.find_types(module_ctx, name, origin)
        return found[0] if found else None

    def types_named(self, name: str) -> list[TypeElement]:
        """Every type with the given qualified name, in declaration order."""
        return list(self._types.get(name, ()))

    def find_type_in(self, module: ModuleElement | None, name: str) -> TypeElement | None:
        """Look a qualified type name up strictly within one module."""
        for cand in self._types.get(name, []):
            if self.get_module_of(cand) is module:
                return cand
        return None

    def find_package(
        self, module_ctx: ModuleElement | None, name: str, origin: Element | None = None
    ) -> PackageElement | None:
        candidates = self._packages.get(name, [])
        if module_ctx is not None:
            for cand in candidates:
                if cand.module is module_ctx:
                    return cand
        if not candidates:
            return None
        if len(candidates) > 1:
            candidates = self._order_candidates(candidates)
            self._report_ambiguity(
                DiagnosticKind.AMBIGUOUS_PACKAGE, name, candidates, origin
            )
        return candidates[0]

    def find_package_in(self, module: ModuleElement | None, name: str) -> PackageElement | None:
        for cand in self._packages.get(name, []):
            if cand.module is module:
                return cand
        return None

    def _order_candidates(self, candidates: list) -> list:
        if not self.config.sort_ambiguous_candidates:
            return list(candidates)

        def module_name(e: Element) -> str:
            module = self.get_module_of(e)
            return module.qualified_name if module else ""

        return sorted(candidates, key=module_name)

    def _report_ambiguity(
        self,
        kind: DiagnosticKind,
        name: str,
        candidates: list,
        origin: Element | None,
    ) -> None:
        modules = [
            (m.qualified_name if (m := self.get_module_of(c)) else "<unnamed>")
            for c in candidates
        ]
        what = "type" if kind == DiagnosticKind.AMBIGUOUS_TYPE else "package"
        self.diagnostics.record(
            kind,
            name,
            f"Ambiguous {what} {name} found in modules {', '.join(modules)}; "
            f"using the one in {modules[0]}",
            origin,
        )

    # Structure

    def get_enclosing(self, element: Element) -> Element | None:
        return element.enclosing

    def get_module_of(self, element: Element) -> ModuleElement | None:
        current: Element | None = element
        while current is not None:
            if isinstance(current, ModuleElement):
                return current
            current = current.enclosing
        return None

    def get_package_of(self, element: Element) -> PackageElement | None:
        current: Element | None = element
        while current is not None:
            if isinstance(current, PackageElement):
                return current
            current = current.enclosing
        return None

    def top_level_type_of(self, element: Element) -> TypeElement | None:
        """The outermost type enclosing ``element`` (or ``element`` itself)."""
        found: TypeElement | None = None
        current: Element | None = element
        while current is not None:
            if isinstance(current, TypeElement):
                found = current
            current = current.enclosing
        return found

    def enclosing_types(self, element: Element) -> list[TypeElement]:
        """``element`` if it is a type, then each enclosing type, innermost first."""
        result: list[TypeElement] = []
        current: Element | None = element
        while isinstance(current, TypeElement):
            result.append(current)
            current = current.enclosing
        return result

    def encloses_or_same(self, outer: Element, inner: Element) -> bool:
        current: Element | None = inner
        while current is not None:
            if current is outer:
                return True
            current = current.enclosing
        return False

    def methods_in(self, t: TypeElement) -> list[ExecutableElement]:
        return [m for m in t.members if m.kind == ElementKind.METHOD]

    def constructors_in(self, t: TypeElement) -> list[ExecutableElement]:
        return [m for m in t.members if m.kind == ElementKind.CONSTRUCTOR]

    def fields_in(self, t: TypeElement) -> list[VariableElement]:
        """Fields and enum constants, in declaration order."""
        return [m for m in t.members if m.kind.is_variable]

    def nested_types_in(self, t: TypeElement) -> list[TypeElement]:
        return [m for m in t.members if m.kind.is_type]

    # Types

    def superclass_of(self, t: TypeElement) -> TypeElement | None:
        return self._superclass.get(t.id)

    def interfaces_of(self, t: TypeElement) -> list[TypeElement]:
        return list(self._interfaces.get(t.id, ()))

    def direct_supertypes(self, t: TypeElement) -> list[TypeElement]:
        sup = self.superclass_of(t)
        return ([sup] if sup else []) + self.interfaces_of(t)

    def supertype_closure(self, t: TypeElement) -> tuple[TypeElement, ...]:
        """All transitive supertypes of ``t`` in discovery order, ``t`` excluded."""
        closure = self._closures.get(t.id)
        if closure is None:
            closure = tuple(e for e in supertype_closure(self._graph, t.id) if e is not t)
            self._closures[t.id] = closure
        return closure

    def is_subtype(self, a: TypeElement, b: TypeElement) -> bool:
        """Whether ``a`` is ``b`` or inherits from it."""
        return a is b or b in self.supertype_closure(a)

    def erasure(self, type_ref: TypeRef) -> TypeRef:
        return type_ref.erasure()

    def strip_arrays(self, type_ref: TypeRef) -> TypeRef:
        return type_ref.component()

    def as_element(self, type_ref: TypeRef | None, context: Element | None = None) -> TypeElement | None:
        """The declaration of a non-array declared type, if it is in the universe."""
        if type_ref is None or type_ref.kind != TypeKind.DECLARED or type_ref.dims:
            return None
        module = self.get_module_of(context) if context is not None else None
        return self.find_type(module, type_ref.name, context)

    def is_enum_type(self, element: Element | None) -> bool:
        if not isinstance(element, TypeElement):
            return False
        if element.kind == ElementKind.ENUM:
            return True
        base = self.find_type(None, self.config.enum_base)
        return base is not None and element is not base and self.is_subtype(element, base)

    def is_enum_value_of(self, element: Element) -> bool:
        """Whether ``element`` is an enum's generated ``valueOf(String)``."""
        if element.kind != ElementKind.METHOD or element.name != "valueOf":
            return False
        if not self.is_enum_type(element.enclosing):
            return False
        params = element.parameters
        return len(params) == 1 and params[0].type.erasure() == TypeRef.declared(
            self.config.string_type
        )

    def is_enum_values(self, element: Element) -> bool:
        """Whether ``element`` is an enum's generated ``values()``."""
        if element.kind != ElementKind.METHOD or element.name != "values":
            return False
        return self.is_enum_type(element.enclosing) and not element.parameters

    # Overriding

    def _bindings(self, in_type: TypeElement, ancestor: TypeElement) -> dict[str, TypeRef]:
        """Type arguments that ``in_type`` supplies for ``ancestor``'s type parameters."""
        frontier: list[tuple[TypeElement, dict[str, TypeRef]]] = [(in_type, {})]
        seen: set[int] = set()
        while frontier:
            current, bindings = frontier.pop(0)
            if current is ancestor:
                return bindings
            if current.id in seen:
                continue
            seen.add(current.id)
            refs = ([current.superclass] if current.superclass else []) + list(current.interfaces)
            for ref in refs:
                sup = self.as_element(replace(ref, args=()), current)
                if sup is None:
                    continue
                params = list(sup.type_parameters)
                sub: dict[str, TypeRef] = {}
                if len(ref.args) == len(params):
                    sub = {p: _substitute(a, bindings) for p, a in zip(params, ref.args)}
                frontier.append((sup, sub))
        return {}

    def _parameter_types(
        self, method: ExecutableElement, in_type: TypeElement
    ) -> tuple[TypeRef, ...]:
        owner = method.enclosing
        if not isinstance(owner, TypeElement) or owner is in_type:
            return method.erased_parameter_types()
        bindings = {
            k: v
            for k, v in self._bindings(in_type, owner).items()
            if k not in method.type_parameters
        }
        return tuple(_substitute(p.type, bindings).erasure() for p in method.parameters)

    def overrides(
        self,
        overrider: Element,
        overridden: Element,
        in_type: TypeElement,
    ) -> bool:
        """Whether ``overrider``, as a member of ``in_type``, overrides ``overridden``."""
        if overrider is overridden:
            return False
        if overrider.kind != ElementKind.METHOD or overridden.kind != ElementKind.METHOD:
            return False
        if overrider.name != overridden.name or overrider.is_static:
            return False
        if overridden.is_private or overridden.is_static:
            return False
        owner = overridden.enclosing
        if not isinstance(owner, TypeElement) or owner is in_type:
            return False
        if not self.is_subtype(in_type, owner):
            return False
        if not overridden.is_visible:
            if self.get_package_of(owner) is not self.get_package_of(in_type):
                return False
        if len(overrider.parameters) != len(overridden.parameters):
            return False
        return self._parameter_types(overrider, in_type) == self._parameter_types(
            overridden, in_type
        )

    def overridden_methods(
        self, method: ExecutableElement, ancestors: Iterable[TypeElement]
    ) -> Iterator[ExecutableElement]:
        """Methods that ``method`` overrides, at most one per ancestor, in the given order."""
        owner = method.enclosing
        if not isinstance(owner, TypeElement):
            return
        for ancestor in ancestors:
            for candidate in self.methods_in(ancestor):
                if self.overrides(method, candidate, owner):
                    yield candidate
                    break

    # Catalogue

    def get_all_members(self, t: TypeElement) -> list[Element]:
        """Declared members followed by those inherited from ancestors.

        Constructors, private members and package-private members of other
        packages are not inherited. An inherited method is dropped when an
        already-listed method overrides it; fields and nested types are
        dropped when a member of the same kind and name is already listed.
        """
        result: list[Element] = list(t.members)
        package = self.get_package_of(t)
        for ancestor in compute_inheritance_order(self, t):
            for member in ancestor.members:
                if member.kind == ElementKind.CONSTRUCTOR or member.is_private:
                    continue
                if not member.is_visible and self.get_package_of(ancestor) is not package:
                    continue
                if member.kind == ElementKind.METHOD:
                    if any(
                        m.kind == ElementKind.METHOD
                        and self.overrides(m, member, t)
                        for m in result
                    ):
                        continue
                elif any(_hides(m, member) for m in result):
                    continue
                result.append(member)
        return result

    def __repr__(self) -> str:
        return (
            f"SymbolUniverse(modules={len(self.modules)}, packages={len(self.packages)}, "
            f"types={len(self.types)})"
        )


def _substitute(ref: TypeRef, bindings: dict[str, TypeRef]) -> TypeRef:
    if not bindings:
        return ref
    if ref.kind == TypeKind.TYPEVAR and ref.name in bindings:
        bound = bindings[ref.name]
        return replace(bound, dims=bound.dims + ref.dims)
    if ref.args:
        return replace(ref, args=tuple(_substitute(a, bindings) for a in ref.args))
    return ref


def _hides(existing: Element, inherited: Element) -> bool:
    """Whether a listed field or nested type hides an inherited one of the same name."""
    if existing.name != inherited.name or existing.kind.is_executable:
        return False
    return existing.kind.is_type == inherited.kind.is_type
