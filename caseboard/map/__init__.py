"""
Choropleth map document handling: loading, coloring, labels and tooltip.
"""

from .choropleth import (
    ChoroplethDocument,
    MapDocumentError,
    ShapeHandle,
    ShapeStyle,
    is_visible,
    shape_style,
)
from .geometry import Bounds, element_bounds
from .loader import (
    BUNDLED_MAP_PATH,
    DocumentCache,
    LoadedMap,
    MapDocumentLoader,
    MapSource,
    read_bundled_map,
)
from .tooltip import TooltipContent, TooltipState, clamp_tooltip_position, fit_tooltip_size

__all__ = [
    "ChoroplethDocument",
    "MapDocumentError",
    "ShapeHandle",
    "ShapeStyle",
    "is_visible",
    "shape_style",
    "Bounds",
    "element_bounds",
    "BUNDLED_MAP_PATH",
    "DocumentCache",
    "LoadedMap",
    "MapDocumentLoader",
    "MapSource",
    "read_bundled_map",
    "TooltipContent",
    "TooltipState",
    "clamp_tooltip_position",
    "fit_tooltip_size",
]
