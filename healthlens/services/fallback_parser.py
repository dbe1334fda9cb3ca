"""Line-based regex parser used when AI extraction yields nothing usable.

Works for reports where a marker sits on one line:
    <name> [: or =] <value> [unit] [... reference range]
"""
import re

from healthlens.schemas.markers import RawMarker

LINE_PAT = re.compile(
    r"^\s*(?P<name>[A-Za-z][A-Za-z0-9 .,()/+\-]*?)(?:\s*[:=]\s*|\s+)"
    r"(?P<value>\d+(?:\.\d+)?)(?![\d.])"
    r"(?:\s*(?P<unit>%|[^\s\d(][^\s(),;]*))?",
    re.ASCII,
)
RANGE_PAT = re.compile(
    r"\d+(?:\.\d+)?\s*(?:-|–|to)\s*\d+(?:\.\d+)?|[<>]\s*\d+(?:\.\d+)?",
    re.IGNORECASE,
)


def parse_line(line: str) -> RawMarker | None:
    match = LINE_PAT.match(line)
    if not match:
        return None
    name = match.group("name").strip(" :-")
    if len(name) < 2:
        return None

    rest = line[match.end():]
    range_match = RANGE_PAT.search(rest)
    return RawMarker(
        name=name,
        value=match.group("value"),
        unit=match.group("unit") or "",
        ref_range=range_match.group(0) if range_match else None,
    )


def parse_text(text: str) -> list[RawMarker]:
    markers = []
    for line in text.splitlines():
        row = parse_line(line)
        if row:
            markers.append(row)
    return markers
