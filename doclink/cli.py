"""CLI entry point for Doclink."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from doclink.config import ResolverConfig
from doclink.core.exceptions import DoclinkError
from doclink.core.inheritdoc import InheritedDoc
from doclink.core.models import Element, ElementQualities, TypeElement
from doclink.core.session import DocSession

app = typer.Typer(
    name="doclink",
    help="Resolve documentation references and inherited docs in a program model.",
    no_args_is_help=True,
)
console = Console()

ModelArg = Annotated[Path, typer.Argument(help="Program model JSON file")]
JsonOpt = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_session(path: Path) -> DocSession:
    """Load a model, or print the error and exit."""
    try:
        return DocSession.from_file(path, ResolverConfig.from_env())
    except DoclinkError as e:
        fail(e)


def fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def require(session: DocSession, reference: str, context: Element | None = None) -> Element:
    try:
        return session.require(reference, context)
    except DoclinkError as e:
        fail(e)


def require_type(session: DocSession, reference: str) -> TypeElement:
    try:
        return session.require_type(reference)
    except DoclinkError as e:
        fail(e)


def element_to_dict(element: Element) -> dict[str, Any]:
    return {
        "name": element.name,
        "qualified_name": element.qualified_name,
        "kind": element.kind.value,
    }


def qualities_to_dict(q: ElementQualities | None) -> dict[str, Any] | None:
    if q is None:
        return None
    return {
        "excluded": q.excluded,
        "deprecation": q.deprecation.name.lower(),
        "causes": sorted(c.qualified_name for c in q.causes),
    }


def format_element(element: Element) -> str:
    return f"[cyan]{element.qualified_name}[/] [dim]({element.kind.value})[/]"


@app.command()
def check(model: ModelArg, output_json: JsonOpt = False) -> None:
    """Load a model, classify it and report diagnostics."""
    session = load_session(model)
    classification = session.classification
    stats = session.diagnostics.stats()

    if output_json:
        result = {
            "modules": len(session.universe.modules),
            "packages": len(session.universe.packages),
            "types": len(session.universe.types),
            "classified": len(classification.qualities),
            "excluded": len(classification.excluded_elements),
            "deprecated": len(classification.deprecated_elements),
            "diagnostics": [d.to_dict() for d in session.diagnostics.records()],
            "stats": stats.to_dict(),
        }
        print(json.dumps(result))
        return

    console.print(f"Modules: {len(session.universe.modules)}")
    console.print(f"Packages: {len(session.universe.packages)}")
    console.print(f"Types: {len(session.universe.types)}")
    console.print(f"Classified elements: {len(classification.qualities)}")
    console.print(f"  Excluded: {len(classification.excluded_elements)}")
    console.print(f"  Deprecated: {len(classification.deprecated_elements)}")
    records = session.diagnostics.records()
    if records:
        console.print(f"[yellow]Diagnostics: {len(records)}[/]")
        for diag in records:
            console.print(f"  [dim]{diag.kind.value}[/] {diag.message}")


@app.command()
def resolve(
    model: ModelArg,
    signature: Annotated[str, typer.Argument(help="Reference such as pkg.Type#m(int)")],
    context: Annotated[
        str | None, typer.Option("--context", "-c", help="Element the reference appears in")
    ] = None,
    output_json: JsonOpt = False,
) -> None:
    """Resolve a documentation reference to an element."""
    session = load_session(model)
    ctx = require(session, context) if context else None
    found = session.resolve_signature(ctx, signature)
    diagnostics = [d.to_dict() for d in session.diagnostics.records()]

    if output_json:
        print(
            json.dumps(
                {
                    "signature": signature,
                    "element": element_to_dict(found) if found else None,
                    "diagnostics": diagnostics,
                }
            )
        )
    elif found is None:
        console.print(f"No element matches '[cyan]{signature}[/cyan]'")
    else:
        console.print(format_element(found))

    if found is None:
        raise typer.Exit(1)


@app.command()
def order(
    model: ModelArg,
    type_name: Annotated[str, typer.Argument(help="Type to list ancestors for")],
    output_json: JsonOpt = False,
) -> None:
    """Show the order in which a type's ancestors are searched."""
    session = load_session(model)
    t = require_type(session, type_name)
    try:
        ancestors = session.get_inheritance_order(t)
    except DoclinkError as e:
        fail(e)

    if output_json:
        print(json.dumps({"type": t.qualified_name, "order": [a.qualified_name for a in ancestors]}))
        return
    console.print(f"[bold]{t.qualified_name}[/]")
    if not ancestors:
        console.print("  [dim]No ancestors[/]")
    for i, ancestor in enumerate(ancestors, 1):
        console.print(f"  {i}. {format_element(ancestor)}")


@app.command()
def qualities(
    model: ModelArg,
    reference: Annotated[str, typer.Argument(help="Element reference")],
    output_json: JsonOpt = False,
) -> None:
    """Show whether an element is excluded or deprecated."""
    session = load_session(model)
    element = require(session, reference)
    q = session.get_qualities(element)

    if output_json:
        print(json.dumps({"element": element_to_dict(element), "qualities": qualities_to_dict(q)}))
        return
    console.print(format_element(element))
    if q is None:
        console.print("  [dim]Not classified[/]")
        return
    console.print(f"  Excluded: {'yes' if q.excluded else 'no'}")
    console.print(f"  Deprecation: {q.deprecation.name.lower()}")
    for cause in sorted(q.causes, key=lambda c: c.qualified_name):
        console.print(f"    [yellow]because of[/] {format_element(cause)}")


@app.command()
def inherit(
    model: ModelArg,
    reference: Annotated[str, typer.Argument(help="Type or method reference")],
    param: Annotated[
        int | None, typer.Option("--param", "-p", help="Parameter position, from 0")
    ] = None,
    return_: Annotated[bool, typer.Option("--return", "-r", help="Inherit @return")] = False,
    throws: Annotated[
        str | None, typer.Option("--throws", "-t", help="Inherit @throws for this type")
    ] = None,
    body: Annotated[bool, typer.Option("--body", "-b", help="Inherit the whole body")] = False,
    output_json: JsonOpt = False,
) -> None:
    """Find documentation an element inherits from its ancestors."""
    session = load_session(model)
    element = require(session, reference)
    docs = session.docs

    found: InheritedDoc | None
    try:
        if param is not None:
            found = docs.find_param(element, param)
        elif return_:
            found = docs.find_return(element)
        elif throws:
            found = docs.find_throws(element, require_type(session, throws))
        elif body:
            found = docs.find_body(element)
        else:
            found = docs.find_inherited_summary(element)
    except DoclinkError as e:
        fail(e)

    if output_json:
        print(
            json.dumps(
                {
                    "element": element_to_dict(element),
                    "source": element_to_dict(found.source) if found else None,
                    "text": found.text if found else None,
                }
            )
        )
        return
    if found is None:
        console.print(f"Nothing to inherit for {format_element(element)}")
        return
    console.print(f"[dim]from[/] {format_element(found.source)}")
    console.print(found.text)


@app.command()
def index(
    model: ModelArg,
    type_name: Annotated[str, typer.Argument(help="Type to look up")],
    output_json: JsonOpt = False,
) -> None:
    """Show members that produce, consume or transform a type, and its subtypes."""
    session = load_session(model)
    t = require_type(session, type_name)
    c = session.classification
    sections = {
        "producers": c.lookup(c.producers, t),
        "consumers": c.lookup(c.consumers, t),
        "transformers": c.lookup(c.transformers, t),
        "pseudo_constructors": c.lookup(c.pseudo_constructors, t),
        "subtypes": c.lookup(c.known_subtypes, t),
        "direct_subtypes": c.lookup(c.known_direct_subtypes, t),
    }
    ordered = {
        name: sorted(elements, key=lambda e: e.qualified_name)
        for name, elements in sections.items()
    }

    if output_json:
        result: dict[str, Any] = {"type": t.qualified_name}
        result.update(
            {name: [e.qualified_name for e in elements] for name, elements in ordered.items()}
        )
        print(json.dumps(result))
        return
    console.print(f"[bold]{t.qualified_name}[/]")
    for name, elements in ordered.items():
        if not elements:
            continue
        console.print(f"  [green]{name.replace('_', ' ').capitalize()}:[/]")
        for element in elements:
            console.print(f"    {format_element(element)}")


@app.command()
def members(
    model: ModelArg,
    type_name: Annotated[str, typer.Argument(help="Type to list members of")],
    output_json: JsonOpt = False,
) -> None:
    """List a type's documented members, declared and inherited."""
    session = load_session(model)
    t = require_type(session, type_name)
    try:
        catalogue = session.member_catalogue(t)
    except DoclinkError as e:
        fail(e)
    sections = catalogue.sections()

    if output_json:
        result: dict[str, Any] = {"type": t.qualified_name}
        result.update(
            {name: [e.qualified_name for e in elements] for name, elements in sections.items()}
        )
        print(json.dumps(result))
        return
    console.print(f"[bold]{t.qualified_name}[/]")
    for name, elements in sections.items():
        if not elements:
            continue
        console.print(f"  [green]{name.replace('_', ' ').capitalize()}:[/]")
        for element in elements:
            inherited = "" if element.enclosing is t else f" [dim]from {element.enclosing.name}[/]"
            console.print(f"    [cyan]{element.name}[/]{inherited}")


@app.command()
def undocumented(model: ModelArg, output_json: JsonOpt = False) -> None:
    """List elements with no documentation of their own or inherited."""
    session = load_session(model)
    missing = session.undocumented_report()

    if output_json:
        print(json.dumps([element_to_dict(e) for e in missing]))
        return
    if not missing:
        console.print("[green]Every documented element has a description.[/]")
        return
    console.print(f"[yellow]{len(missing)} elements without documentation:[/]")
    for element in missing:
        console.print(f"  {format_element(element)}")


if __name__ == "__main__":
    app()
