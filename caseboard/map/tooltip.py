"""
Map tooltip state and placement.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models.region import Region

TOOLTIP_OFFSET = 14.0
TOOLTIP_MARGIN = 8.0


def fit_tooltip_size(
    tooltip_width: float,
    tooltip_height: float,
    container_width: float,
    container_height: float,
    margin: float = TOOLTIP_MARGIN,
) -> Tuple[float, float]:
    """Shrink a tooltip size so it fits inside the container's margins."""
    return (
        max(0.0, min(tooltip_width, container_width - 2 * margin)),
        max(0.0, min(tooltip_height, container_height - 2 * margin)),
    )


def clamp_tooltip_position(
    cursor_x: float,
    cursor_y: float,
    tooltip_width: float,
    tooltip_height: float,
    container_width: float,
    container_height: float,
    offset: float = TOOLTIP_OFFSET,
    margin: float = TOOLTIP_MARGIN,
) -> Tuple[float, float]:
    """
    Place the tooltip near the cursor without leaving the container.

    The tooltip sits at cursor + offset, then is pulled back so its box stays
    within ``margin`` of every container edge. A tooltip larger than the
    container is placed as if shrunk by ``fit_tooltip_size``.

    Returns:
        Top-left (x, y) of the tooltip in container coordinates
    """
    tooltip_width, tooltip_height = fit_tooltip_size(
        tooltip_width, tooltip_height, container_width, container_height, margin
    )
    x = cursor_x + offset
    y = cursor_y + offset

    x = min(x, container_width - tooltip_width - margin)
    y = min(y, container_height - tooltip_height - margin)

    return max(x, margin), max(y, margin)


@dataclass(frozen=True)
class TooltipContent:
    """Text shown in the tooltip for one region."""

    title: str
    status: str
    status_label: str
    volume_line: str
    forecast_line: str
    counts_line: str

    @classmethod
    def from_region(cls, region: Region) -> "TooltipContent":
        return cls(
            title=f"{region.display_name} ({region.code})",
            status=region.status.value,
            status_label=region.status.value.upper(),
            volume_line=f"Volume: {region.current_volume} / {region.target_volume}",
            forecast_line=f"30-day forecast: {region.forecast_next_30_days}",
            counts_line=f"Fulfilled: {region.fulfilled_count}  Pending: {region.pending_count}",
        )

    def lines(self) -> List[str]:
        return [self.title, self.status_label, self.volume_line, self.forecast_line, self.counts_line]


class TooltipState:
    """Open/closed state and position of the hover tooltip."""

    def __init__(self) -> None:
        self.region: Optional[Region] = None
        self.x = 0.0
        self.y = 0.0
        self.width = 0.0
        self.height = 0.0

    @property
    def is_open(self) -> bool:
        return self.region is not None

    @property
    def content(self) -> Optional[TooltipContent]:
        if self.region is None:
            return None
        return TooltipContent.from_region(self.region)

    def open(self, region: Region) -> None:
        self.region = region

    def close(self) -> None:
        self.region = None

    def move(
        self,
        cursor_x: float,
        cursor_y: float,
        tooltip_size: Tuple[float, float],
        container_size: Tuple[float, float],
    ) -> Optional[Tuple[float, float]]:
        """
        Reposition the open tooltip.

        The tooltip size is shrunk to fit the container; the fitted size is
        kept in ``width`` and ``height``.

        Returns:
            The new position, or None when the tooltip is closed
        """
        if not self.is_open:
            return None
        self.width, self.height = fit_tooltip_size(
            tooltip_size[0], tooltip_size[1], container_size[0], container_size[1]
        )
        self.x, self.y = clamp_tooltip_position(
            cursor_x,
            cursor_y,
            tooltip_size[0],
            tooltip_size[1],
            container_size[0],
            container_size[1],
        )
        return self.x, self.y
