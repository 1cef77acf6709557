"""Loader for program models described as JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from doclink.core.exceptions import ModelError
from doclink.core.models import (
    CONSTRUCTOR_NAME,
    OBJECT_TYPE_NAME,
    BlockTag,
    DocComment,
    ElementKind,
    ExecutableElement,
    Modifier,
    ModuleElement,
    PackageElement,
    Parameter,
    TypeElement,
    TypeKind,
    TypeRef,
    VariableElement,
)
from doclink.model.models import ProgramModel
from doclink.model.types import TypeScope, parse_type, parse_type_parameters

ENUM_TYPE_NAME = "java.lang.Enum"
STRING_TYPE_NAME = "java.lang.String"

_TYPE_KINDS = {
    "class": ElementKind.CLASS,
    "interface": ElementKind.INTERFACE,
    "enum": ElementKind.ENUM,
    "annotation": ElementKind.ANNOTATION_TYPE,
}
_ACCESS = (Modifier.PUBLIC, Modifier.PROTECTED, Modifier.PRIVATE)


class JsonModelLoader:
    """Loader for ``.json`` program model files."""

    def supports(self, path: Path) -> bool:
        """Check if this loader supports the given file."""
        return path.suffix == ".json"

    def load(self, path: Path) -> ProgramModel:
        """Read a model file and build its elements."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ModelError(f"Cannot read {path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ModelError(f"Invalid JSON in {path}: {e}") from e

        try:
            model = load_model_dict(data)
        except ModelError as e:
            raise ModelError(f"{path}: {e}") from e
        model.source = path
        return model


def load_model_dict(data: Mapping[str, Any]) -> ProgramModel:
    """Build a program model from already-decoded JSON data.

    Raises:
        ModelError: on unknown kinds or modifiers, duplicate declarations,
            references to undeclared modules or enclosing types, and
            malformed type strings.
    """
    if not isinstance(data, Mapping):
        raise ModelError("Program model must be a JSON object")
    builder = _ModelBuilder()
    builder.build(data)
    return builder.model


class _ModelBuilder:
    """Turns decoded JSON into linked elements."""

    def __init__(self) -> None:
        self.model = ProgramModel()
        self._next_id = 0
        self._modules: dict[str, ModuleElement] = {}
        self._packages: dict[tuple[str | None, str], PackageElement] = {}
        self._types: dict[tuple[str | None, str], TypeElement] = {}
        self._scopes: dict[int, dict[str, TypeRef | None]] = {}
        self._pending: list[tuple[TypeElement, Mapping[str, Any]]] = []

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def build(self, data: Mapping[str, Any]) -> None:
        for entry in _list(data, "modules"):
            self._module(entry)
        for entry in _list(data, "packages"):
            self._package(entry)
        types = _list(data, "types")
        # Outer types first so nested declarations can find their enclosing type.
        for entry in sorted(types, key=lambda e: str(_require(e, "name", "type")).count(".")):
            self._type(entry)
        for t, entry in self._pending:
            self._members(t, entry)

    # Containers

    def _module(self, entry: Mapping[str, Any]) -> ModuleElement:
        name = _require(entry, "name", "module")
        if name in self._modules:
            raise ModelError(f"Duplicate module {name}")
        module = ModuleElement(
            id=self._id(),
            name=name,
            qualified_name=name,
            kind=ElementKind.MODULE,
            doc=_doc(entry.get("doc")),
            annotations=tuple(entry.get("annotations", ())),
            included=bool(entry.get("included", True)),
        )
        self._modules[name] = module
        self.model.modules.append(module)
        return module

    def _lookup_module(self, name: str | None, where: str) -> ModuleElement | None:
        if name is None:
            return None
        module = self._modules.get(name)
        if module is None:
            raise ModelError(f"{where} names undeclared module {name}")
        return module

    def _package(self, entry: Mapping[str, Any]) -> PackageElement:
        name = entry.get("name", "")
        module_name = entry.get("module")
        key = (module_name, name)
        if key in self._packages:
            raise ModelError(f"Duplicate package {name or '<unnamed>'} in module {module_name}")
        return self._new_package(
            name,
            self._lookup_module(module_name, f"Package {name}"),
            entry,
        )

    def _new_package(
        self, name: str, module: ModuleElement | None, entry: Mapping[str, Any]
    ) -> PackageElement:
        pkg = PackageElement(
            id=self._id(),
            name=name.rpartition(".")[2],
            qualified_name=name,
            kind=ElementKind.PACKAGE,
            enclosing=module,
            doc=_doc(entry.get("doc")),
            annotations=tuple(entry.get("annotations", ())),
            included=bool(entry.get("included", True)),
            imports=tuple(entry.get("imports", ())),
        )
        if module is not None:
            module.members.append(pkg)
        self._packages[(module.qualified_name if module else None, name)] = pkg
        self.model.packages.append(pkg)
        return pkg

    # Types

    def _type(self, entry: Mapping[str, Any]) -> TypeElement:
        local = _require(entry, "name", "type")
        package_name = entry.get("package", "")
        module_name = entry.get("module")
        qualified = f"{package_name}.{local}" if package_name else local
        if (module_name, qualified) in self._types:
            raise ModelError(f"Duplicate type {qualified}")

        module = self._lookup_module(module_name, f"Type {qualified}")
        pkg = self._packages.get((module_name, package_name))
        if pkg is None:
            pkg = self._new_package(package_name, module, {})

        outer_name, _, simple = local.rpartition(".")
        enclosing = pkg
        outer_scope: dict[str, TypeRef | None] = {}
        if outer_name:
            outer_qualified = f"{package_name}.{outer_name}" if package_name else outer_name
            enclosing = self._types.get((module_name, outer_qualified))
            if enclosing is None:
                raise ModelError(f"Type {qualified} is nested in undeclared {outer_qualified}")
            outer_scope = self._scopes[enclosing.id]

        kind_name = entry.get("kind", "class")
        kind = _TYPE_KINDS.get(kind_name)
        if kind is None:
            raise ModelError(f"Type {qualified} has unknown kind {kind_name!r}")

        try:
            type_params = parse_type_parameters(entry.get("type_parameters", {}), outer_scope)
            scope = {**outer_scope, **type_params}
            superclass = self._superclass(entry, kind, qualified, scope)
            interfaces = tuple(parse_type(i, scope) for i in entry.get("interfaces", ()))
        except ModelError as e:
            raise ModelError(f"Type {qualified}: {e}") from e

        t = TypeElement(
            id=self._id(),
            name=simple,
            qualified_name=qualified,
            kind=kind,
            modifiers=_modifiers(entry, qualified),
            enclosing=enclosing,
            doc=_doc(entry.get("doc")),
            annotations=tuple(entry.get("annotations", ())),
            included=bool(entry.get("included", True)),
            superclass=superclass,
            interfaces=interfaces,
            type_parameters=type_params,
            imports=tuple(entry.get("imports", ())),
        )
        enclosing.members.append(t)
        self._types[(module_name, qualified)] = t
        self._scopes[t.id] = scope
        self.model.types.append(t)
        self._pending.append((t, entry))
        return t

    def _superclass(
        self, entry: Mapping[str, Any], kind: ElementKind, qualified: str, scope: TypeScope
    ) -> TypeRef | None:
        if "superclass" in entry:
            text = entry["superclass"]
            return parse_type(text, scope) if text else None
        if kind == ElementKind.ENUM:
            return TypeRef(TypeKind.DECLARED, ENUM_TYPE_NAME, args=(TypeRef.declared(qualified),))
        if kind == ElementKind.CLASS and qualified != OBJECT_TYPE_NAME:
            return TypeRef.declared(OBJECT_TYPE_NAME)
        return None

    # Members

    def _members(self, t: TypeElement, entry: Mapping[str, Any]) -> None:
        scope = self._scopes[t.id]
        for field_entry in _list(entry, "fields"):
            self._field(t, field_entry, scope)
        constructors = _list(entry, "constructors")
        for ctor_entry in constructors:
            self._executable(t, ctor_entry, scope, ElementKind.CONSTRUCTOR)
        for method_entry in _list(entry, "methods"):
            self._executable(t, method_entry, scope, ElementKind.METHOD)

        if t.kind == ElementKind.CLASS and not constructors:
            access = [m.value for m in _ACCESS if m in t.modifiers]
            self._executable(t, {"modifiers": access}, scope, ElementKind.CONSTRUCTOR)
        if t.kind == ElementKind.ENUM:
            self._enum_helpers(t, scope)

    def _enum_helpers(self, t: TypeElement, scope: TypeScope) -> None:
        declared = {(m.name, len(m.parameters)) for m in t.members if m.kind == ElementKind.METHOD}
        if ("values", 0) not in declared:
            self._executable(
                t,
                {"name": "values", "modifiers": ["public", "static"], "returns": f"{t.qualified_name}[]"},
                scope,
                ElementKind.METHOD,
            )
        if ("valueOf", 1) not in declared:
            self._executable(
                t,
                {
                    "name": "valueOf",
                    "modifiers": ["public", "static"],
                    "parameters": [{"name": "name", "type": STRING_TYPE_NAME}],
                    "returns": t.qualified_name,
                },
                scope,
                ElementKind.METHOD,
            )

    def _field(self, t: TypeElement, entry: Mapping[str, Any], scope: TypeScope) -> None:
        name = _require(entry, "name", f"field of {t.qualified_name}")
        qualified = f"{t.qualified_name}#{name}"
        kind = (
            ElementKind.ENUM_CONSTANT
            if entry.get("kind") == "enum_constant"
            else ElementKind.FIELD
        )
        if kind == ElementKind.ENUM_CONSTANT:
            type_ref = t.as_type()
            modifiers = frozenset({Modifier.PUBLIC, Modifier.STATIC, Modifier.FINAL})
        else:
            try:
                type_ref = parse_type(_require(entry, "type", qualified), scope)
            except ModelError as e:
                raise ModelError(f"Field {qualified}: {e}") from e
            modifiers = _modifiers(entry, qualified)
        t.members.append(
            VariableElement(
                id=self._id(),
                name=name,
                qualified_name=qualified,
                kind=kind,
                modifiers=modifiers,
                enclosing=t,
                doc=_doc(entry.get("doc")),
                annotations=tuple(entry.get("annotations", ())),
                type=type_ref,
                constant_value=entry.get("constant"),
            )
        )

    def _executable(
        self,
        t: TypeElement,
        entry: Mapping[str, Any],
        outer: TypeScope,
        kind: ElementKind,
    ) -> None:
        if kind == ElementKind.CONSTRUCTOR:
            name = CONSTRUCTOR_NAME
            label = t.name
        else:
            name = _require(entry, "name", f"method of {t.qualified_name}")
            label = name
        where = f"{t.qualified_name}#{label}"
        try:
            type_params = parse_type_parameters(entry.get("type_parameters", {}), outer)
            scope = {**outer, **type_params}
            params = []
            for p in _list(entry, "parameters"):
                ptype = parse_type(_require(p, "type", f"parameter of {where}"), scope)
                params.append(Parameter(_require(p, "name", f"parameter of {where}"), ptype))
            returns = None
            if kind == ElementKind.METHOD:
                returns = parse_type(entry.get("returns", "void"), scope)
            thrown = tuple(parse_type(x, scope) for x in entry.get("throws", ()))
        except ModelError as e:
            raise ModelError(f"{where}: {e}") from e

        varargs = bool(entry.get("varargs", False)) or bool(
            entry.get("parameters") and str(entry["parameters"][-1].get("type", "")).endswith("...")
        )
        signature = ",".join(str(p.type.erasure()) for p in params)
        t.members.append(
            ExecutableElement(
                id=self._id(),
                name=name,
                qualified_name=f"{where}({signature})",
                kind=kind,
                modifiers=_modifiers(entry, where),
                enclosing=t,
                doc=_doc(entry.get("doc")),
                annotations=tuple(entry.get("annotations", ())),
                parameters=tuple(params),
                return_type=returns,
                thrown=thrown,
                varargs=varargs,
                type_parameters=type_params,
            )
        )


def _list(entry: Mapping[str, Any], key: str) -> list[Any]:
    value = entry.get(key, [])
    if not isinstance(value, list):
        raise ModelError(f"{key!r} must be a list")
    return value


def _require(entry: Mapping[str, Any], key: str, what: str) -> Any:
    if not isinstance(entry, Mapping):
        raise ModelError(f"Each {what} must be a JSON object")
    if key not in entry:
        raise ModelError(f"Missing {key!r} in {what}")
    return entry[key]


def _modifiers(entry: Mapping[str, Any], where: str) -> frozenset[Modifier]:
    result = set()
    for text in entry.get("modifiers", ()):
        try:
            result.add(Modifier(text))
        except ValueError as e:
            raise ModelError(f"{where} has unknown modifier {text!r}") from e
    return frozenset(result)


def _doc(raw: Any) -> DocComment | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return DocComment(body=raw)
    if not isinstance(raw, Mapping):
        raise ModelError("Documentation must be a string or an object")
    tags = tuple(
        BlockTag(kind=_require(tag, "tag", "doc tag"), text=tag.get("text", ""), name=tag.get("name"))
        for tag in raw.get("tags", ())
    )
    return DocComment(
        body=raw.get("body", ""),
        tags=tags,
        first_sentence_text=raw.get("first_sentence"),
    )
