"""
Doclink: reference resolution and inherited documentation for API doc generators.

Doclink loads a program model (modules, packages, types and members with
their documentation) and answers the questions a documentation generator
asks while rendering it:
- Which element does a ``pkg.Type#member(params)`` reference name?
- Is an element excluded or deprecated, and because of what?
- Which ancestor supplies a summary, parameter, return or throws doc?
- Which members produce, consume or transform a given type?

Usage:
    from doclink.core import DocSession

    session = DocSession.from_file(Path("model.json"))
    method = session.require("com.example.Dog#speak()")
    session.write_inherited_summary(print, method)
"""

__version__ = "0.1.0"
