"""
Lexical Facet Extraction — regex fallback for languages without a parser
and for fragments that do not parse.

Only imports and referenced identifiers are recovered, so structural rules
simply find nothing to check.
"""

from __future__ import annotations

import re

from rulegate.models.source_models import Facets, ImportEntry

JVM_IMPORT = re.compile(r"^\s*import\s+(static\s+)?([A-Za-z_][\w.]*?)(\.\*)?\s*;?\s*$")
PY_FROM_IMPORT = re.compile(r"^\s*from\s+([.\w]+)\s+import\s+(.+?)\s*$")
PY_IMPORT = re.compile(r"^\s*import\s+([\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+(?:\s+as\s+\w+)?)*)\s*$")
IDENTIFIER = re.compile(r"[A-Za-z_]\w*")
STRING_OR_COMMENT = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|//.*$|#.*$', re.MULTILINE)


def _parse_import_line(line: str, lineno: int, python_style: bool) -> list[ImportEntry]:
    if not python_style:
        return _parse_jvm_import(line, lineno)

    match = PY_FROM_IMPORT.match(line)
    if match:
        module, names = match.group(1), match.group(2).strip("() ")
        if names == "*":
            return [ImportEntry(symbol_path=f"{module}.*", is_wildcard=True, line=lineno)]
        entries = []
        for part in names.split(","):
            pieces = part.split()
            if not pieces:
                continue
            bound = pieces[-1] if len(pieces) == 3 and pieces[1] == "as" else pieces[0]
            entries.append(
                ImportEntry(symbol_path=f"{module}.{pieces[0]}", bound_name=bound, line=lineno)
            )
        return entries

    match = PY_IMPORT.match(line)
    if match:
        entries = []
        for part in match.group(1).split(","):
            pieces = part.split()
            bound = pieces[2] if len(pieces) == 3 else pieces[0].split(".")[0]
            entries.append(ImportEntry(symbol_path=pieces[0], bound_name=bound, line=lineno))
        return entries
    return []


def _parse_jvm_import(line: str, lineno: int) -> list[ImportEntry]:
    match = JVM_IMPORT.match(line)
    if not match:
        return []
    path, wildcard = match.group(2), bool(match.group(3))
    return [
        ImportEntry(
            symbol_path=f"{path}.*" if wildcard else path,
            is_wildcard=wildcard,
            bound_name="" if wildcard else path.rsplit(".", 1)[-1],
            line=lineno,
            is_static=bool(match.group(1)),
        )
    ]


def extract_lexical_facets(source: str, note: str, python_style: bool = False) -> Facets:
    """Best-effort extraction of imports and identifiers."""
    imports: list[ImportEntry] = []
    body_lines: list[str] = []
    for lineno, line in enumerate(source.splitlines(), start=1):
        entries = _parse_import_line(line, lineno, python_style) if "import" in line else []
        if entries:
            imports.extend(entries)
        else:
            body_lines.append(line)

    body = STRING_OR_COMMENT.sub(" ", "\n".join(body_lines))
    identifiers = set(IDENTIFIER.findall(body))

    return Facets(
        imports=tuple(imports),
        identifier_references=tuple(sorted(identifiers)),
        unknown_constructs=(note,),
    )
