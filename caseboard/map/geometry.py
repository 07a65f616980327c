"""
Bounding boxes for SVG shapes.

Covers rect, circle, ellipse, polygon, polyline and path elements in user
units. Curve and arc extents are approximated by their control and end
points, which is enough to centre a label. Shapes with a ``transform`` are
not handled here; the Qt renderer supplies real bounds for those.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple
from xml.etree.ElementTree import Element

Point = Tuple[float, float]

_PATH_TOKEN = re.compile(
    r"([MmLlHhVvCcSsQqTtAaZz])|([-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?)"
)
_NUMBER = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")

PARAM_COUNTS = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def min_side(self) -> float:
        return min(self.width, self.height)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    @classmethod
    def from_points(cls, points: List[Point]) -> "Bounds":
        if not points:
            raise ValueError("Cannot compute bounds of an empty shape")
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def local_name(tag: str) -> str:
    """Strip the namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _length(element: Element, name: str, default: float = 0.0) -> float:
    raw = element.get(name)
    if raw is None:
        return default
    match = _NUMBER.match(raw.strip())
    if not match:
        raise ValueError(f"Unsupported length for {name}: {raw!r}")
    return float(match.group(0))


def path_points(d: str) -> List[Point]:
    """
    Collect the absolute points (end and control points) of path data.

    Raises:
        ValueError: If the path data is malformed
    """
    tokens = _PATH_TOKEN.findall(d)
    points: List[Point] = []
    x = y = 0.0
    start = (0.0, 0.0)
    command: Optional[str] = None
    i = 0

    while i < len(tokens):
        letter, _ = tokens[i]
        if letter:
            command = letter
            i += 1
            if command in "Zz":
                x, y = start
            continue

        if command is None:
            raise ValueError("Path data must start with a command")
        upper = command.upper()
        count = PARAM_COUNTS[upper]
        if count == 0:
            raise ValueError("Unexpected number after closepath")

        chunk = tokens[i:i + count]
        if len(chunk) < count or any(letter for letter, _ in chunk):
            raise ValueError(f"Not enough parameters for command {command}")
        args = [float(number) for _, number in chunk]
        i += count

        relative = command.islower()
        base_x, base_y = (x, y) if relative else (0.0, 0.0)

        if upper == "H":
            x = args[0] + base_x
            points.append((x, y))
        elif upper == "V":
            y = args[0] + base_y
            points.append((x, y))
        elif upper == "A":
            x, y = args[5] + base_x, args[6] + base_y
            points.append((x, y))
        else:
            for j in range(0, count, 2):
                points.append((args[j] + base_x, args[j + 1] + base_y))
            x, y = points[-1]

        if upper == "M":
            start = (x, y)
            # Extra coordinate pairs after a moveto are implicit linetos
            command = "l" if relative else "L"

    return points


def element_bounds(element: Element) -> Optional[Bounds]:
    """
    Compute the bounding box of a shape element.

    Returns:
        Bounds, or None for unsupported elements or transformed shapes

    Raises:
        ValueError: If the geometry attributes are malformed
    """
    if element.get("transform"):
        return None

    name = local_name(element.tag)

    if name == "rect":
        return Bounds(
            _length(element, "x"),
            _length(element, "y"),
            _length(element, "width"),
            _length(element, "height"),
        )
    if name == "circle":
        r = _length(element, "r")
        return Bounds(_length(element, "cx") - r, _length(element, "cy") - r, 2 * r, 2 * r)
    if name == "ellipse":
        rx, ry = _length(element, "rx"), _length(element, "ry")
        return Bounds(_length(element, "cx") - rx, _length(element, "cy") - ry, 2 * rx, 2 * ry)
    if name in ("polygon", "polyline"):
        numbers = [float(n) for n in _NUMBER.findall(element.get("points", ""))]
        pairs = list(zip(numbers[0::2], numbers[1::2]))
        return Bounds.from_points(pairs)
    if name == "path":
        return Bounds.from_points(path_points(element.get("d", "")))
    if name == "g":
        boxes = [b for b in (element_bounds(child) for child in element) if b is not None]
        if not boxes:
            return None
        corners = []
        for b in boxes:
            corners.extend([(b.x, b.y), (b.x + b.width, b.y + b.height)])
        return Bounds.from_points(corners)
    return None
