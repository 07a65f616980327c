"""
Tests for choropleth coloring, labels and shape indexing.
"""

import pytest

from caseboard.map import Bounds, ChoroplethDocument, MapDocumentError, read_bundled_map
from caseboard.map.choropleth import (
    DIMMED_OPACITY,
    LABEL_GROUP_ID,
    NEUTRAL_COLOR,
    STATUS_COLORS,
    STROKE_COLOR,
)
from caseboard.map.geometry import local_name
from caseboard.models import Region, RegionStatus, StatusFilter

SAMPLE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100">
  <g id="states">
    <rect id="state-TX" data-region="TX" x="10" y="10" width="44" height="44"
          fill="#ff0000" class="state" style="fill:#ffffff;stroke:none"/>
    <path id="state-CA" data-region="ca" d="M60 10 h44 v44 h-44 Z" opacity="0.5"/>
    <path data-region="AK" d="M110 10 h44 v44 h-44 Z"/>
    <path id="state-ZZ" data-region="ZZ" d="M160 10 h20 v20 h-20 Z"/>
    <path id="decoration" d="M0 0 h5 v5 h-5 Z"/>
  </g>
</svg>
"""


def parse_style(style: str) -> dict:
    result = {}
    for part in style.split(";"):
        if ":" in part:
            key, value = part.split(":", 1)
            result[key.strip()] = value.strip()
    return result


def regions_by_code(regions):
    return {region.code: region for region in regions}


class TestShapeIndex:
    """Tests for building the code -> shape map."""

    def test_indexes_region_shapes_by_uppercased_code(self):
        document = ChoroplethDocument(SAMPLE_SVG)

        assert set(document.shapes) == {"TX", "CA", "AK", "ZZ"}
        assert document.shapes["CA"].element_id == "state-CA"

    def test_assigns_id_to_shapes_without_one(self):
        document = ChoroplethDocument(SAMPLE_SVG)

        handle = document.shapes["AK"]
        assert handle.element_id == "region-AK"
        assert handle.element.get("id") == "region-AK"

    def test_first_shape_wins_on_duplicate_code(self):
        svg = """<svg xmlns="http://www.w3.org/2000/svg">
            <rect id="first" data-region="TX" x="0" y="0" width="10" height="10"/>
            <rect id="second" data-region="TX" x="20" y="0" width="10" height="10"/>
        </svg>"""
        document = ChoroplethDocument(svg)

        assert document.shapes["TX"].element_id == "first"

    def test_custom_region_attribute(self):
        svg = """<svg xmlns="http://www.w3.org/2000/svg">
            <rect id="tx" data-state="TX" x="0" y="0" width="10" height="10"/>
        </svg>"""
        document = ChoroplethDocument(svg, region_attribute="data-state")

        assert list(document.shapes) == ["TX"]

    def test_unparseable_document_raises(self):
        with pytest.raises(MapDocumentError):
            ChoroplethDocument("<svg><unclosed></svg>")

    def test_non_svg_root_raises(self):
        with pytest.raises(MapDocumentError):
            ChoroplethDocument("<html><body/></html>")

    def test_entity_declarations_are_rejected(self):
        svg = """<?xml version="1.0"?>
        <!DOCTYPE svg [<!ENTITY boom "boom">]>
        <svg xmlns="http://www.w3.org/2000/svg"><text>&boom;</text></svg>"""
        with pytest.raises(MapDocumentError):
            ChoroplethDocument(svg)

    def test_bundled_map_has_every_state(self):
        document = ChoroplethDocument(read_bundled_map())

        assert len(document.shapes) == 51
        assert "DC" in document.shapes


class TestColoring:
    """Tests for status coloring and dimming."""

    @pytest.mark.parametrize("status_filter", list(StatusFilter))
    def test_non_matching_shapes_are_dimmed_never_hidden(self, regions, status_filter):
        document = ChoroplethDocument(SAMPLE_SVG)
        known = regions_by_code(regions)

        document.apply_colors(known, status_filter)

        for code, handle in document.shapes.items():
            opacity = float(parse_style(handle.element.get("style"))["opacity"])
            assert opacity > 0
            region = known.get(code)
            matches = status_filter == StatusFilter.ALL or (
                region is not None and region.status.value == status_filter.value
            )
            if matches:
                assert opacity == 1.0
            else:
                assert opacity < 1.0

    def test_all_filter_colors_by_status(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_colors(regions_by_code(regions), StatusFilter.ALL)

        fills = {
            code: parse_style(handle.element.get("style"))["fill"]
            for code, handle in document.shapes.items()
        }
        assert fills["TX"] == STATUS_COLORS[RegionStatus.LOW]
        assert fills["CA"] == STATUS_COLORS[RegionStatus.ACTIVE]
        assert fills["AK"] == STATUS_COLORS[RegionStatus.INACTIVE]
        assert fills["ZZ"] == NEUTRAL_COLOR

    def test_filtered_out_shapes_are_neutral(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_colors(regions_by_code(regions), StatusFilter.ACTIVE)

        tx_style = parse_style(document.shapes["TX"].element.get("style"))
        assert tx_style["fill"] == NEUTRAL_COLOR
        assert float(tx_style["opacity"]) == DIMMED_OPACITY

    def test_document_styling_is_overridden(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_colors(regions_by_code(regions), StatusFilter.ALL)

        tx = document.shapes["TX"].element
        assert tx.get("fill") is None
        assert tx.get("class") is None
        assert document.shapes["CA"].element.get("opacity") is None

        style = parse_style(tx.get("style"))
        assert style["fill"] == STATUS_COLORS[RegionStatus.LOW]
        assert style["stroke"] == STROKE_COLOR
        assert "#ffffff" not in tx.get("style")

    def test_cursor_marks_known_regions(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_colors(regions_by_code(regions), StatusFilter.ALL)

        assert parse_style(document.shapes["TX"].element.get("style"))["cursor"] == "pointer"
        assert parse_style(document.shapes["ZZ"].element.get("style"))["cursor"] == "default"


class TestLabels:
    """Tests for the label overlay."""

    def _texts(self, document):
        group = document.label_group()
        return [el for el in group if local_name(el.tag) == "text"]

    def test_labels_visible_known_shapes(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        placed = document.apply_labels(regions_by_code(regions), StatusFilter.ALL)

        assert placed == 3
        assert sorted(t.text for t in self._texts(document)) == ["AK", "CA", "TX"]

    def test_label_group_is_not_interactive(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_labels(regions_by_code(regions), StatusFilter.ALL)

        group = document.label_group()
        assert group.get("id") == LABEL_GROUP_ID
        assert group.get("pointer-events") == "none"

    def test_label_centered_with_proportional_font(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        document.apply_labels(regions_by_code(regions), StatusFilter.ALL)

        tx = next(t for t in self._texts(document) if t.text == "TX")
        assert float(tx.get("x")) == pytest.approx(32.0)
        assert tx.get("text-anchor") == "middle"
        assert float(tx.get("font-size")) == pytest.approx(17.6)

    def test_small_shapes_get_minimum_font_size(self):
        svg = """<svg xmlns="http://www.w3.org/2000/svg">
            <rect data-region="RI" x="0" y="0" width="6" height="6"/>
        </svg>"""
        document = ChoroplethDocument(svg)

        document.apply_labels({"RI": Region(code="RI", display_name="Rhode Island")}, StatusFilter.ALL)

        text = self._texts(document)[0]
        assert float(text.get("font-size")) == pytest.approx(8.0)

    def test_filter_limits_labels(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        placed = document.apply_labels(regions_by_code(regions), StatusFilter.LOW)

        assert placed == 1
        assert [t.text for t in self._texts(document)] == ["TX"]

    def test_relabeling_replaces_previous_group(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)
        known = regions_by_code(regions)

        document.apply_labels(known, StatusFilter.ALL)
        document.apply_labels(known, StatusFilter.ACTIVE)

        groups = [el for el in document.root.iter() if el.get("id") == LABEL_GROUP_ID]
        assert len(groups) == 1
        assert [t.text for t in self._texts(document)] == ["CA"]

    def test_bounds_failure_skips_only_that_shape(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)

        def bounds_for(handle):
            if handle.code == "CA":
                raise RuntimeError("no geometry")
            if handle.code == "AK":
                return None
            return Bounds(0, 0, 40, 20)

        placed = document.apply_labels(regions_by_code(regions), StatusFilter.ALL, bounds_for)

        assert placed == 1
        assert [t.text for t in self._texts(document)] == ["TX"]

    def test_serialized_document_keeps_svg_namespace(self, regions):
        document = ChoroplethDocument(SAMPLE_SVG)
        document.apply_colors(regions_by_code(regions), StatusFilter.ALL)
        document.apply_labels(regions_by_code(regions), StatusFilter.ALL)

        text = document.to_string()

        assert text.startswith("<svg")
        assert 'xmlns="http://www.w3.org/2000/svg"' in text
        assert LABEL_GROUP_ID in text
