"""
Diff Parser — Turns a single-file unified diff into the post-image text
and the set of changed lines.

The post-image keeps every context and added line at its new-file line
number; lines the diff does not show are blank, so extracted facets carry
real file line numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from rulegate.core.errors import FacetExtractionError
from rulegate.models.source_models import LineRange

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass
class ParsedDiff:
    """Post-image of a diff plus the new-file lines it touches."""

    post_image: str
    changed_lines: tuple[LineRange, ...]
    hunks: tuple[LineRange, ...] = ()
    target_path: str = ""
    hunk_count: int = 0
    added: int = 0
    removed: int = 0


@dataclass
class _Hunk:
    old_remaining: int
    new_remaining: int
    new_cursor: int
    lines: dict[int, str] = field(default_factory=dict)


def parse_unified_diff(text: str) -> ParsedDiff:
    """
    Parse a unified diff that targets exactly one file.

    Raises:
        FacetExtractionError: no hunks, malformed hunk header, truncated hunk,
            or more than one target file.
    """
    post_lines: dict[int, str] = {}
    changed: set[int] = set()
    targets: list[str] = []
    hunk: _Hunk | None = None
    hunk_spans: list[LineRange] = []
    hunk_count = added = removed = 0

    for raw in text.splitlines():
        if hunk is not None and (hunk.old_remaining > 0 or hunk.new_remaining > 0):
            if raw.startswith("\\"):
                continue
            marker, body = (raw[:1], raw[1:]) if raw else (" ", "")
            if marker == "+":
                post_lines[hunk.new_cursor] = body
                changed.add(hunk.new_cursor)
                hunk.new_cursor += 1
                hunk.new_remaining -= 1
                added += 1
            elif marker == "-":
                changed.add(max(hunk.new_cursor, 1))
                hunk.old_remaining -= 1
                removed += 1
            elif marker == " ":
                post_lines[hunk.new_cursor] = body
                hunk.new_cursor += 1
                hunk.new_remaining -= 1
                hunk.old_remaining -= 1
            else:
                raise FacetExtractionError(f"truncated hunk before line: {raw[:60]!r}")
            continue

        if raw.startswith("\\"):
            continue
        if raw.startswith("+++ "):
            path = raw[4:].split("\t")[0].strip()
            if path.startswith("b/"):
                path = path[2:]
            if path not in targets:
                targets.append(path)
            if len(targets) > 1:
                raise FacetExtractionError(
                    "diff spans multiple files; submit one unit per file"
                )
            continue
        if raw.startswith("@@"):
            match = HUNK_HEADER.match(raw)
            if not match:
                raise FacetExtractionError(f"malformed hunk header: {raw[:60]!r}")
            old_count = int(match.group(2)) if match.group(2) is not None else 1
            new_start = int(match.group(3))
            new_count = int(match.group(4)) if match.group(4) is not None else 1
            hunk = _Hunk(
                old_remaining=old_count,
                new_remaining=new_count,
                new_cursor=new_start if new_count else new_start + 1,
            )
            hunk_count += 1
            if new_count:
                hunk_spans.append(LineRange(start=new_start, end=new_start + new_count - 1))

    if hunk_count == 0:
        raise FacetExtractionError("diff contains no hunks")
    if hunk is not None and (hunk.old_remaining > 0 or hunk.new_remaining > 0):
        raise FacetExtractionError("truncated hunk at end of diff")

    last = max(post_lines) if post_lines else 0
    post_image = "\n".join(post_lines.get(n, "") for n in range(1, last + 1))

    return ParsedDiff(
        post_image=post_image,
        changed_lines=merge_line_ranges(changed),
        hunks=tuple(hunk_spans),
        target_path=targets[0] if targets else "",
        hunk_count=hunk_count,
        added=added,
        removed=removed,
    )


def merge_line_ranges(lines: set[int]) -> tuple[LineRange, ...]:
    """Collapse individual line numbers into sorted, merged ranges."""
    ranges: list[LineRange] = []
    start = end = None
    for line in sorted(lines):
        if start is None:
            start = end = line
        elif line == end + 1:
            end = line
        else:
            ranges.append(LineRange(start=start, end=end))
            start = end = line
    if start is not None:
        ranges.append(LineRange(start=start, end=end))
    return tuple(ranges)
