"""
Choropleth map document.

Wraps a parsed SVG map: indexes region shapes by code, recolors them by
region status and overlays a non-interactive group of region labels.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

import defusedxml.ElementTree as DefusedET

from ..models.region import Region, RegionStatus, StatusFilter
from ..utils import get_logger
from .geometry import Bounds, element_bounds, local_name

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

STATUS_COLORS = {
    RegionStatus.ACTIVE: "#22C55E",
    RegionStatus.LOW: "#F59E0B",
    RegionStatus.INACTIVE: "#EF4444",
}
NEUTRAL_COLOR = "#D1D5DB"
STROKE_COLOR = "#1F2937"
STROKE_WIDTH = 1.0
DIMMED_OPACITY = 0.25

LABEL_GROUP_ID = "region-labels"
LABEL_SCALE = 0.4
MIN_LABEL_FONT_SIZE = 8.0
LABEL_FILL = "#FFFFFF"
LABEL_OUTLINE = "#111827"

# Presentation attributes the document may carry that would fight our styling
OVERRIDDEN_ATTRIBUTES = (
    "fill", "fill-opacity", "opacity", "stroke", "stroke-width",
    "stroke-opacity", "cursor", "class",
)


class MapDocumentError(Exception):
    """Raised when a map document cannot be parsed."""
    pass


@dataclass
class ShapeHandle:
    """A region-bearing shape in the document."""

    code: str
    element: ET.Element
    element_id: str


@dataclass(frozen=True)
class ShapeStyle:
    """Resolved style for one shape."""

    fill: str
    opacity: float
    stroke: str
    stroke_width: float
    cursor: str

    def to_css(self) -> str:
        return (
            f"fill: {self.fill}; opacity: {self.opacity:g}; "
            f"stroke: {self.stroke}; stroke-width: {self.stroke_width:g}; "
            f"cursor: {self.cursor}"
        )


BoundsProvider = Callable[[ShapeHandle], Optional[Bounds]]


def is_visible(region: Optional[Region], status_filter: StatusFilter) -> bool:
    """A shape is visible when the filter is ALL or its region's status matches."""
    if status_filter == StatusFilter.ALL:
        return True
    return region is not None and region.status.value == status_filter.value


def shape_style(region: Optional[Region], status_filter: StatusFilter) -> ShapeStyle:
    """
    Resolve the style of a shape.

    Args:
        region: The shape's region, or None if its code is unknown
        status_filter: Active status filter

    Returns:
        ShapeStyle to apply
    """
    visible = is_visible(region, status_filter)
    if region is not None and visible:
        fill = STATUS_COLORS[region.status]
    else:
        fill = NEUTRAL_COLOR
    return ShapeStyle(
        fill=fill,
        opacity=1.0 if visible else DIMMED_OPACITY,
        stroke=STROKE_COLOR,
        stroke_width=STROKE_WIDTH,
        cursor="pointer" if region is not None else "default",
    )


def label_font_size(bounds: Bounds) -> float:
    """Font size proportional to the smaller side, clamped to a minimum."""
    return max(MIN_LABEL_FONT_SIZE, bounds.min_side * LABEL_SCALE)


def default_bounds(handle: ShapeHandle) -> Optional[Bounds]:
    return element_bounds(handle.element)


class ChoroplethDocument:
    """A parsed SVG map with region shapes indexed by code."""

    def __init__(self, text: str, region_attribute: str = "data-region") -> None:
        """
        Parse a map document.

        Args:
            text: SVG document text
            region_attribute: Attribute carrying each shape's region code

        Raises:
            MapDocumentError: If the document is not a usable SVG
        """
        self.region_attribute = region_attribute
        self.logger = get_logger("choropleth")

        try:
            self.root = DefusedET.fromstring(text)
        except Exception as e:
            raise MapDocumentError(f"Unreadable map document: {e}") from e

        if local_name(self.root.tag) != "svg":
            raise MapDocumentError(f"Expected an <svg> root, got <{local_name(self.root.tag)}>")

        self.namespace = self.root.tag[1:].split("}")[0] if self.root.tag.startswith("{") else ""
        self.shapes: Dict[str, ShapeHandle] = self._index_shapes()

    def _index_shapes(self) -> Dict[str, ShapeHandle]:
        """Build the code -> shape map. The first shape wins on duplicate codes."""
        shapes: Dict[str, ShapeHandle] = {}
        for element in self.root.iter():
            raw = element.get(self.region_attribute)
            if not raw or not raw.strip():
                continue
            code = raw.strip().upper()
            if code in shapes:
                self.logger.debug(f"Duplicate shape for region {code} ignored")
                continue
            element_id = element.get("id")
            if not element_id:
                element_id = f"region-{code}"
                element.set("id", element_id)
            shapes[code] = ShapeHandle(code=code, element=element, element_id=element_id)
        return shapes

    def _tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def apply_colors(self, regions: Mapping[str, Region], status_filter: StatusFilter) -> None:
        """
        Restyle every region shape for the given regions and filter.

        The shape's inline style is replaced wholesale and conflicting
        presentation attributes are removed, so document styling never wins.
        """
        for code, handle in self.shapes.items():
            style = shape_style(regions.get(code), status_filter)
            for name in OVERRIDDEN_ATTRIBUTES:
                handle.element.attrib.pop(name, None)
            handle.element.set("style", style.to_css())

    def apply_labels(
        self,
        regions: Mapping[str, Region],
        status_filter: StatusFilter,
        bounds_for: Optional[BoundsProvider] = None,
    ) -> int:
        """
        Replace the label overlay.

        Args:
            regions: Known regions by code
            status_filter: Active status filter
            bounds_for: Bounding-box provider (defaults to element geometry)

        Returns:
            Number of labels placed
        """
        bounds_for = bounds_for or default_bounds
        self.remove_labels()

        group = ET.SubElement(self.root, self._tag("g"), {
            "id": LABEL_GROUP_ID,
            "pointer-events": "none",
        })

        placed = 0
        for code, handle in self.shapes.items():
            region = regions.get(code)
            if region is None or not is_visible(region, status_filter):
                continue
            try:
                bounds = bounds_for(handle)
            except Exception as e:
                self.logger.debug(f"Skipping label for {code}: {e}")
                continue
            if bounds is None or bounds.width <= 0 or bounds.height <= 0:
                continue

            font_size = label_font_size(bounds)
            cx, cy = bounds.center
            text = ET.SubElement(group, self._tag("text"), {
                "x": f"{cx:.2f}",
                # Shift the baseline so the glyphs sit on the vertical centre
                "y": f"{cy + font_size * 0.35:.2f}",
                "text-anchor": "middle",
                "font-family": "Helvetica, Arial, sans-serif",
                "font-size": f"{font_size:.1f}",
                "font-weight": "bold",
                "fill": LABEL_FILL,
                "stroke": LABEL_OUTLINE,
                "stroke-width": f"{max(0.5, font_size * 0.08):.2f}",
                "paint-order": "stroke",
                "pointer-events": "none",
            })
            text.text = code
            placed += 1

        return placed

    def remove_labels(self) -> None:
        """Remove any previously rendered label group."""
        for parent in list(self.root.iter()):
            for child in list(parent):
                if child.get("id") == LABEL_GROUP_ID:
                    parent.remove(child)

    def label_group(self) -> Optional[ET.Element]:
        """Get the current label group, if any."""
        for element in self.root.iter():
            if element.get("id") == LABEL_GROUP_ID:
                return element
        return None

    def to_string(self) -> str:
        """Serialize the document."""
        return ET.tostring(self.root, encoding="unicode")

    def to_bytes(self) -> bytes:
        return self.to_string().encode("utf-8")
