"""Parsing of type strings such as ``java.util.Map<K, V>[]``."""

from __future__ import annotations

from collections.abc import Mapping

from doclink.core.exceptions import ModelError
from doclink.core.models import PRIMITIVE_NAMES, TypeKind, TypeRef

TypeScope = Mapping[str, "TypeRef | None"]


class _TypeParser:
    def __init__(self, text: str, scope: TypeScope) -> None:
        self.text = text
        self.scope = scope
        self.pos = 0

    def error(self, reason: str) -> ModelError:
        return ModelError(f"Malformed type {self.text!r} at {self.pos}: {reason}")

    def skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self, n: int = 1) -> str:
        self.skip_space()
        return self.text[self.pos : self.pos + n]

    def take(self, token: str) -> bool:
        if self.peek(len(token)) == token:
            self.pos += len(token)
            return True
        return False

    def name(self) -> str:
        self.skip_space()
        start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch.isalnum() or ch in "_$":
                self.pos += 1
            elif ch == "." and self.text[self.pos : self.pos + 3] != "...":
                self.pos += 1
            else:
                break
        found = self.text[start : self.pos]
        if not found or found.startswith(".") or found.endswith(".") or ".." in found:
            raise self.error("expected a type name")
        return found

    def type_ref(self) -> TypeRef:
        if self.take("?"):
            bound = None
            if self.peek(7) == "extends":
                self.pos += 7
                bound = self.type_ref()
            elif self.peek(5) == "super":
                self.pos += 5
                self.type_ref()
            return TypeRef(TypeKind.TYPEVAR, "?", bound=bound)

        name = self.name()
        args: list[TypeRef] = []
        if self.take("<"):
            args.append(self.type_ref())
            while self.take(","):
                args.append(self.type_ref())
            if not self.take(">"):
                raise self.error("expected '>'")

        dims = 0
        while self.take("["):
            if not self.take("]"):
                raise self.error("expected ']'")
            dims += 1
        if self.take("..."):
            dims += 1

        if name in PRIMITIVE_NAMES:
            if args:
                raise self.error("primitive types take no arguments")
            return TypeRef(TypeKind.PRIMITIVE, name, dims)
        if name == "void":
            return TypeRef(TypeKind.VOID, name, dims)
        if name in self.scope:
            return TypeRef(TypeKind.TYPEVAR, name, dims, bound=self.scope[name])
        return TypeRef(TypeKind.DECLARED, name, dims, tuple(args))

    def parse(self) -> TypeRef:
        ref = self.type_ref()
        # Intersection bounds erase to their first component.
        while self.take("&"):
            self.type_ref()
        self.skip_space()
        if self.pos != len(self.text):
            raise self.error("unexpected trailing text")
        return ref


def parse_type(text: str, scope: TypeScope | None = None) -> TypeRef:
    """Parse a type use. Names found in ``scope`` become type variables with that bound.

    A trailing ``...`` counts as one array dimension.

    Raises:
        ModelError: if the text is not a valid type.
    """
    if not text or not text.strip():
        raise ModelError("Empty type")
    return _TypeParser(text, scope or {}).parse()


def parse_type_parameters(
    declared: Mapping[str, str | None], outer: TypeScope | None = None
) -> dict[str, TypeRef | None]:
    """Parse ``{name: bound}`` declarations in order; each bound sees earlier parameters."""
    scope: dict[str, TypeRef | None] = dict(outer or {})
    result: dict[str, TypeRef | None] = {}
    for name in declared:
        scope[name] = None
    for name, bound in declared.items():
        parsed = parse_type(bound, scope) if bound else None
        scope[name] = parsed
        result[name] = parsed
    return result
