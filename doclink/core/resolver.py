"""Resolution of textual references to program elements."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from doclink.core.diagnostics import DiagnosticKind
from doclink.core.exceptions import SignatureSyntaxError
from doclink.core.models import (
    PRIMITIVE_NAMES,
    Element,
    ElementKind,
    ModuleElement,
    PackageElement,
    TypeElement,
    TypeKind,
    TypeRef,
)
from doclink.core.signature import Signature, parse_signature
from doclink.core.universe import SymbolUniverse

logger = logging.getLogger(__name__)


def _is_scope(element: Element) -> bool:
    return element.kind.is_type or element.kind in (ElementKind.PACKAGE, ElementKind.MODULE)


class SignatureResolver:
    """Resolve references such as ``Foo#bar(int)`` from a documentation context.

    Lookups never raise for missing or ambiguous targets: they return None
    (or the preferred candidate) and record a diagnostic.
    """

    def __init__(self, universe: SymbolUniverse) -> None:
        self.universe = universe
        self.config = universe.config
        self.diagnostics = universe.diagnostics

    def resolve_signature(self, context: Element | None, text: str) -> Element | None:
        """Resolve reference text in the scope of ``context`` (None for global)."""
        try:
            sig = parse_signature(text)
        except SignatureSyntaxError as e:
            self.diagnostics.record(
                DiagnosticKind.MALFORMED_SIGNATURE, text, str(e), context
            )
            return None
        found = self.resolve(context, sig)
        if found is None:
            where = f" from {context.qualified_name}" if context else ""
            self.diagnostics.record(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                text,
                f"Cannot resolve reference {text!r}{where}",
                context,
            )
        return found

    def resolve(self, context: Element | None, sig: Signature) -> Element | None:
        roots = self.module_package_class(context, sig.module, sig.package_class)
        if not roots:
            return None
        if sig.member is None:
            return roots[0]

        if not isinstance(roots[0], TypeElement):
            self.diagnostics.record(
                DiagnosticKind.MEMBER_OF_NON_TYPE,
                str(sig),
                f"Reference {sig} names member {sig.member!r} of "
                f"{roots[0].kind.value} {roots[0].qualified_name}",
                context,
            )
            return None

        types = [r for r in roots if isinstance(r, TypeElement)]
        path = self.search_path(types)
        if sig.parameters is None:
            for t in path:
                for f in self.universe.fields_in(t):
                    if f.name == sig.member:
                        return f
            return None

        wanted = [
            self._parameter_type(context, p.type_name, sig).array_of(p.total_dims).erasure()
            for p in sig.parameters
        ]
        for t in path:
            # Constructors are not inherited.
            constructor_match = t in types and sig.member == t.name
            for member in t.members:
                if member.kind == ElementKind.METHOD:
                    if member.name != sig.member:
                        continue
                elif member.kind == ElementKind.CONSTRUCTOR:
                    if not constructor_match:
                        continue
                else:
                    continue
                if len(member.parameters) != len(wanted):
                    continue
                if list(member.erased_parameter_types()) == wanted:
                    return member
        return None

    def search_path(self, roots: Sequence[TypeElement]) -> list[TypeElement]:
        """The roots followed by their supertypes, level by level, each listed once."""
        path: dict[int, TypeElement] = {r.id: r for r in roots}
        level = list(path.values())
        while level:
            fresh: list[TypeElement] = []
            for t in level:
                for sup in self.universe.direct_supertypes(t):
                    if sup.id not in path:
                        path[sup.id] = sup
                        fresh.append(sup)
            level = fresh
        return list(path.values())

    # Types of parameters

    def resolve_type(self, context: Element | None, text: str) -> TypeRef | None:
        """Resolve a type name as written in a parameter list."""
        if text in PRIMITIVE_NAMES:
            return TypeRef.primitive(text)
        if text == "void":
            return TypeRef(TypeKind.VOID, "void")
        module_text, sep, rest = text.partition("/")
        if not sep:
            module_text, rest = None, text
        for found in self.module_package_class(context, module_text, rest) or ():
            if isinstance(found, TypeElement):
                return found.as_type()
        return None

    def _parameter_type(self, context: Element | None, text: str, sig: Signature) -> TypeRef:
        resolved = self.resolve_type(context, text)
        if resolved is not None:
            return resolved
        literal = self._literal_name(context, text.rpartition("/")[2])
        self.diagnostics.record(
            DiagnosticKind.UNRESOLVED_PARAMETER_TYPE,
            text,
            f"Cannot resolve parameter type {text!r} in {sig}; matching it as {literal}",
            context,
        )
        return TypeRef.declared(literal)

    def _literal_name(self, context: Element | None, text: str) -> str:
        """Expand a name through single-type imports, else the implicit namespace.

        Used when no declaration is known, so platform types such as
        ``String`` still match the qualified names members are declared with.
        """
        imports: tuple[str, ...] = ()
        if context is not None:
            top = self.universe.top_level_type_of(context)
            if top is not None:
                imports = top.imports
            elif isinstance(context, PackageElement):
                imports = context.imports
        prefix, dot, suffix = text.partition(".")
        for imp in imports:
            if not imp.startswith("static ") and imp.endswith("." + prefix):
                return imp + dot + suffix
        if not dot:
            return self.config.implicit(text)
        return text

    # Roots

    def module_package_class(
        self,
        context: Element | None,
        module_text: str | None,
        package_class_text: str | None,
    ) -> list[Element] | None:
        """Find the module, package or type(s) named left of ``#``."""
        universe = self.universe
        if module_text is not None:
            module = universe.find_module(module_text)
            if module is None:
                return None
            if not package_class_text:
                return [module]
            t = universe.find_type_in(module, package_class_text)
            if t is not None:
                return [t]
            pkg = universe.find_package_in(module, package_class_text)
            return [pkg] if pkg is not None else None

        origin = context
        while context is not None and not _is_scope(context):
            context = context.enclosing

        if package_class_text is None:
            if context is None:
                return None
            if isinstance(context, TypeElement):
                return list(universe.enclosing_types(context))
            return [context]

        text = package_class_text
        if context is None:
            return (
                self._seek_types(None, text, origin)
                or self._seek_types(None, self.config.implicit(text), origin)
                or self._seek_package(None, text, origin)
            )

        if isinstance(context, PackageElement):
            module = context.module
            return (
                self._seek_types(module, _join(context.qualified_name, text), origin)
                or self._seek_types(module, text, origin)
                or self._seek_import(module, context.imports, text)
                or self._seek_types(module, self.config.implicit(text), origin)
                or self._seek_package(module, text, origin)
            )

        if isinstance(context, ModuleElement):
            return self._seek_types(context, text, origin)

        module = universe.get_module_of(context)
        top = context
        for enclosing in universe.enclosing_types(context):
            top = enclosing
            nested = universe.find_type_in(module, f"{enclosing.qualified_name}.{text}")
            if nested is not None:
                return [nested]

        pkg = universe.get_package_of(context)
        sibling = universe.find_type_in(module, _join(pkg.qualified_name if pkg else "", text))
        if sibling is not None:
            return [sibling]

        return (
            self._seek_import(module, top.imports, text)
            or self._seek_types(module, text, origin)
            or self._seek_types(module, self.config.implicit(text), origin)
            or self._seek_package(module, text, origin)
        )

    def _seek_types(
        self, module: ModuleElement | None, name: str, origin: Element | None
    ) -> list[Element] | None:
        return list(self.universe.find_types(module, name, origin)) or None

    def _seek_package(
        self, module: ModuleElement | None, name: str, origin: Element | None
    ) -> list[Element] | None:
        pkg = self.universe.find_package(module, name, origin)
        return [pkg] if pkg is not None else None

    def _seek_import(
        self, module: ModuleElement | None, imports: Sequence[str], text: str
    ) -> list[Element] | None:
        """Expand ``text`` through import declarations.

        Only the first name component is matched: against the last component
        of a single-type import, or appended to an on-demand import. Static
        imports are ignored.
        """
        prefix, dot, rest = text.partition(".")
        suffix = dot + rest
        for imp in imports:
            if imp.startswith("static "):
                continue
            if imp.endswith(".*"):
                candidate = imp[:-1] + prefix
            elif imp.endswith("." + prefix):
                candidate = imp
            else:
                continue
            full = candidate + suffix
            found = self.universe.find_type_in(module, full)
            if found is None:
                others = self.universe.types_named(full)
                if len(others) != 1:
                    continue
                found = others[0]
            return [found]
        return None


def _join(package: str, name: str) -> str:
    return f"{package}.{name}" if package else name
