"""Parser for textual element references.

Grammar::

    signature  := [module "/"] [name] ["#" ident ["(" [params] ")"]]
    module     := name
    name       := ident ("." ident)*
    params     := param ("," param)*
    param      := [module "/"] name ("[" "]")* ["..."]

At least one of module, name and member must be present, and only the last
parameter may be variable arity. Whitespace is allowed around commas and
inside the parentheses.
"""

from __future__ import annotations

from dataclasses import dataclass

from doclink.core.exceptions import SignatureSyntaxError


@dataclass(frozen=True)
class SignatureParameter:
    """A parameter type as written in a reference."""

    type_name: str
    dims: int = 0
    varargs: bool = False

    @property
    def total_dims(self) -> int:
        """Array dimensions including the one implied by ``...``."""
        return self.dims + (1 if self.varargs else 0)

    def __str__(self) -> str:
        return self.type_name + "[]" * self.dims + ("..." if self.varargs else "")


@dataclass(frozen=True)
class Signature:
    """A parsed reference.

    ``parameters`` is None when no parenthesised list was given, and an
    empty tuple for ``#m()``.
    """

    module: str | None = None
    package_class: str | None = None
    member: str | None = None
    parameters: tuple[SignatureParameter, ...] | None = None

    @property
    def is_executable(self) -> bool:
        return self.parameters is not None

    def __str__(self) -> str:
        text = f"{self.module}/" if self.module is not None else ""
        text += self.package_class or ""
        if self.member is not None:
            text += f"#{self.member}"
            if self.parameters is not None:
                text += "(" + ",".join(str(p) for p in self.parameters) + ")"
        return text


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def fail(self, reason: str) -> SignatureSyntaxError:
        return SignatureSyntaxError(self.text, self.pos, reason)

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos : self.pos + n]

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_space(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def expect(self, token: str) -> None:
        if self.peek(len(token)) != token:
            raise self.fail(f"expected {token!r}")
        self.pos += len(token)

    def ident(self) -> str:
        start = self.pos
        if self.at_end() or not _is_ident_start(self.text[self.pos]):
            raise self.fail("expected identifier")
        self.pos += 1
        while not self.at_end() and _is_ident_part(self.text[self.pos]):
            self.pos += 1
        return self.text[start : self.pos]

    def name(self) -> str:
        parts = [self.ident()]
        # A dot followed by another dot starts "...", not a name component.
        while self.peek() == "." and self.peek(2) != "..":
            self.pos += 1
            parts.append(self.ident())
        return ".".join(parts)

    def qualified(self) -> tuple[str | None, str | None]:
        """Parse ``[module "/"] [name]``."""
        module = None
        name = None
        if not self.at_end() and _is_ident_start(self.text[self.pos]):
            name = self.name()
        if self.peek() == "/":
            if name is None:
                raise self.fail("empty module name")
            self.pos += 1
            module, name = name, None
            if not self.at_end() and _is_ident_start(self.text[self.pos]):
                name = self.name()
        return module, name

    def parameter(self) -> SignatureParameter:
        module, name = self.qualified()
        if name is None:
            raise self.fail("expected parameter type")
        dims = 0
        while self.peek() == "[":
            self.pos += 1
            self.skip_space()
            self.expect("]")
            dims += 1
        varargs = False
        if self.peek(3) == "...":
            self.pos += 3
            varargs = True
        type_name = f"{module}/{name}" if module is not None else name
        return SignatureParameter(type_name, dims, varargs)

    def parameters(self) -> tuple[SignatureParameter, ...]:
        self.expect("(")
        self.skip_space()
        params: list[SignatureParameter] = []
        if self.peek() == ")":
            self.pos += 1
            return ()
        while True:
            self.skip_space()
            if params and params[-1].varargs:
                raise self.fail("only the last parameter may be variable arity")
            params.append(self.parameter())
            self.skip_space()
            if self.peek() == ",":
                self.pos += 1
                continue
            self.expect(")")
            return tuple(params)

    def signature(self) -> Signature:
        module, name = self.qualified()
        member = None
        params = None
        if self.peek() == "#":
            self.pos += 1
            member = self.ident()
            if self.peek() == "(":
                params = self.parameters()
        if not self.at_end():
            raise self.fail("unexpected trailing text")
        if module is None and name is None and member is None:
            raise self.fail("empty reference")
        return Signature(module, name, member, params)


def parse_signature(text: str) -> Signature:
    """Parse reference text such as ``java.util/java.util.List#add(int,E)``.

    Raises:
        SignatureSyntaxError: if the text does not follow the grammar.
    """
    return _Parser(text.strip()).signature()
