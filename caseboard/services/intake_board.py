"""
Intake board service.

View state behind the intake map page: the region set, the newest-first
order list, the active status filter, the loaded choropleth document with
its bound shape handlers, and the hover tooltip. Qt-free; the map widget
drives it and re-renders on its change notifications.
"""

import math
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from ..database.db_manager import DatabaseManager
from ..map.choropleth import BoundsProvider, ChoroplethDocument, MapDocumentError, ShapeHandle
from ..map.loader import LoadedMap, MapDocumentLoader, MapSource, read_bundled_map
from ..map.tooltip import TooltipState
from ..models import (
    WINDOW_DAY_OPTIONS,
    ActionType,
    Actor,
    IntakeOrder,
    Region,
    RegionStatus,
    StatusFilter,
)
from ..utils import get_logger


class BoardEvent(str, Enum):
    """Change notifications emitted by the board."""
    MAP_LOADED = "map_loaded"
    COLORS_APPLIED = "colors_applied"
    TOOLTIP_CHANGED = "tooltip_changed"
    ORDERS_CHANGED = "orders_changed"
    FORM_CHANGED = "form_changed"


BoardListener = Callable[[BoardEvent], None]


def _as_count(value, minimum: int) -> Optional[int]:
    """Coerce a form value to a finite integer >= minimum, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= minimum else None
    if isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            pass
        else:
            return number if number >= minimum else None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or not number.is_integer() or number < minimum:
        return None
    return int(number)


class IntakeBoard:
    """Regions, intake orders and choropleth map state."""

    def __init__(
        self,
        regions: Iterable[Region],
        orders: Optional[Iterable[IntakeOrder]] = None,
        loader: Optional[MapDocumentLoader] = None,
        db_manager: Optional[DatabaseManager] = None,
        audit_logger=None,
        region_attribute: str = "data-region",
    ) -> None:
        """
        Initialize intake board.

        Args:
            regions: Initial regions
            orders: Existing orders, newest first
            loader: Map document loader
            db_manager: Database for persisting accepted orders (optional)
            audit_logger: Audit logger (optional)
            region_attribute: Attribute carrying each shape's region code
        """
        self.regions: Dict[str, Region] = {region.code: region for region in regions}
        self.orders: List[IntakeOrder] = list(orders or [])
        self.loader = loader
        self.db_manager = db_manager
        self.audit_logger = audit_logger
        self.region_attribute = region_attribute
        self.logger = get_logger("intake_board")

        self.status_filter = StatusFilter.ALL
        self.form_open = False
        self.tooltip = TooltipState()

        self.document: Optional[ChoroplethDocument] = None
        self.loaded: Optional[LoadedMap] = None
        self.bounds_for: Optional[BoundsProvider] = None

        # Region code -> shape handle, rebuilt on every document load
        self._handles: Dict[str, ShapeHandle] = {}
        self._pointer_move_bound = False
        self._torn_down = False
        self._listeners: List[BoardListener] = []

    # Change notification

    def add_listener(self, listener: BoardListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: BoardListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: BoardEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # Map document lifecycle

    @property
    def source(self) -> Optional[MapSource]:
        return self.loaded.source if self.loaded else None

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    def load_map(self) -> bool:
        """
        Run the load protocol synchronously and mount the result.

        Returns:
            True if a document was mounted
        """
        if self.loader is None:
            raise RuntimeError("No map loader configured")
        return self.mount_document(self.loader.load())

    def mount_document(self, loaded: LoadedMap) -> bool:
        """
        Inject a loaded document, bind handlers and apply colors.

        A remote document that cannot be parsed is replaced by the cached
        copy, and failing that by the bundled one. Results arriving after
        teardown are discarded.

        Returns:
            True if the document was mounted
        """
        if self._torn_down:
            self.logger.debug("Discarding map document loaded after teardown")
            return False

        while True:
            try:
                document = ChoroplethDocument(loaded.text, self.region_attribute)
                break
            except MapDocumentError as e:
                if loaded.source == MapSource.BUNDLED:
                    raise
                self.logger.warning(f"Map document from {loaded.source.value} unusable: {e}")
                loaded = self._fallback_for(loaded.source)

        self.unbind_handlers()
        self.document = document
        self.loaded = loaded
        self.bind_handlers()

        unknown = sorted(set(self.regions) - set(document.shapes))
        if unknown:
            self.logger.debug(f"Regions without a map shape: {', '.join(unknown)}")

        self.apply_map_colors()
        self._notify(BoardEvent.MAP_LOADED)

        if self.audit_logger:
            self.audit_logger.log_action(
                action_type=ActionType.MAP_DOCUMENT_LOADED,
                actor=Actor.SYSTEM,
                details={"source": loaded.source.value, "shapes": len(document.shapes)},
            )
        return True

    def _fallback_for(self, source: MapSource) -> LoadedMap:
        """Next document to try after one from ``source`` failed to parse."""
        if source == MapSource.REMOTE and self.loader is not None:
            cached = self.loader.cache.get()
            if cached:
                return LoadedMap(text=cached, source=MapSource.CACHE)
        if self.loader is not None:
            return LoadedMap(text=read_bundled_map(self.loader.bundled_path), source=MapSource.BUNDLED)
        return LoadedMap(text=read_bundled_map(), source=MapSource.BUNDLED)

    def bind_handlers(self) -> None:
        """Bind enter/leave handlers per shape and the container move handler."""
        if self.document is None:
            return
        self._handles = dict(self.document.shapes)
        self._pointer_move_bound = True

    def unbind_handlers(self) -> None:
        """Detach every bound interaction handler."""
        self._handles = {}
        self._pointer_move_bound = False
        if self.tooltip.is_open:
            self.tooltip.close()
            self._notify(BoardEvent.TOOLTIP_CHANGED)

    @property
    def bound_handle_count(self) -> int:
        return len(self._handles)

    def teardown(self) -> None:
        """Detach handlers and stop accepting late load results."""
        self.unbind_handlers()
        self._torn_down = True
        self._listeners.clear()
        self.logger.debug("Intake board torn down")

    def set_bounds_provider(self, provider: Optional[BoundsProvider]) -> None:
        """Set the bounding-box provider used for labels (None = geometry)."""
        self.bounds_for = provider

    # Filtering and derived aggregates

    def set_status_filter(self, status_filter: StatusFilter) -> None:
        status_filter = StatusFilter(status_filter)
        if status_filter == self.status_filter:
            return
        self.status_filter = status_filter
        self.apply_map_colors()

    @property
    def filtered_regions(self) -> List[Region]:
        """Regions passing the status filter, sorted by code."""
        return [
            region for code, region in sorted(self.regions.items())
            if region.matches(self.status_filter)
        ]

    def status_counts(self) -> Dict[RegionStatus, int]:
        counts = {status: 0 for status in RegionStatus}
        for region in self.regions.values():
            counts[region.status] += 1
        return counts

    def totals(self, regions: Optional[Iterable[Region]] = None) -> Dict[str, int]:
        """Sum the volume columns over the given regions (default: filtered)."""
        regions = list(self.filtered_regions if regions is None else regions)
        return {
            "current_volume": sum(r.current_volume for r in regions),
            "target_volume": sum(r.target_volume for r in regions),
            "forecast_next_30_days": sum(r.forecast_next_30_days for r in regions),
            "fulfilled_count": sum(r.fulfilled_count for r in regions),
            "pending_count": sum(r.pending_count for r in regions),
        }

    # Coloring and labels

    def apply_map_colors(self) -> None:
        """Recolor every shape, then redraw labels."""
        if self.document is None:
            return
        self.document.apply_colors(self.regions, self.status_filter)
        self.apply_state_labels()
        self._notify(BoardEvent.COLORS_APPLIED)

    def apply_state_labels(self) -> int:
        if self.document is None:
            return 0
        return self.document.apply_labels(self.regions, self.status_filter, self.bounds_for)

    def is_interactive(self, code: Optional[str]) -> bool:
        """Known regions get a pointer cursor and a tooltip."""
        return code is not None and code.upper() in self.regions and code.upper() in self._handles

    # Pointer interaction

    def pointer_enter(self, code: str) -> bool:
        """
        Handle the pointer entering a shape.

        Returns:
            True if the tooltip opened
        """
        code = code.upper()
        if code not in self._handles:
            return False
        region = self.regions.get(code)
        if region is None:
            return False
        self.tooltip.open(region)
        self._notify(BoardEvent.TOOLTIP_CHANGED)
        return True

    def pointer_leave(self, code: str) -> None:
        """Handle the pointer leaving a shape."""
        code = code.upper()
        if code not in self._handles:
            return
        if self.tooltip.region is not None and self.tooltip.region.code == code:
            self.tooltip.close()
            self._notify(BoardEvent.TOOLTIP_CHANGED)

    def pointer_move(
        self,
        x: float,
        y: float,
        tooltip_size: Tuple[float, float],
        container_size: Tuple[float, float],
    ) -> Optional[Tuple[float, float]]:
        """
        Handle pointer movement over the map container.

        Returns:
            New tooltip position, or None when no tooltip is open
        """
        if not self._pointer_move_bound:
            return None
        return self.tooltip.move(x, y, tooltip_size, container_size)

    # Order submission

    def open_order_form(self) -> None:
        self.form_open = True
        self._notify(BoardEvent.FORM_CHANGED)

    def close_order_form(self) -> None:
        self.form_open = False
        self._notify(BoardEvent.FORM_CHANGED)

    def create_order(
        self,
        region_code,
        volume,
        sales_forecast,
        window_days,
    ) -> Optional[IntakeOrder]:
        """
        Submit an intake order.

        Invalid input is a silent no-op: no order, no region change, and the
        form stays open.

        Returns:
            The new order, or None if the input was rejected
        """
        code = str(region_code or "").strip().upper()
        volume_value = _as_count(volume, 1)
        forecast_value = _as_count(sales_forecast, 0)
        window_value = _as_count(window_days, 1)

        if not code or volume_value is None or forecast_value is None:
            self.logger.debug("Rejected intake order: invalid region, volume or forecast")
            return None
        if window_value is None or window_value not in WINDOW_DAY_OPTIONS:
            self.logger.debug(f"Rejected intake order: invalid window {window_days!r}")
            return None

        try:
            order = IntakeOrder(
                region_code=code,
                volume=volume_value,
                sales_forecast=forecast_value,
                window_days=window_value,
            )
        except ValidationError as e:
            self.logger.debug(f"Rejected intake order: {e}")
            return None
        self.orders.insert(0, order)

        region = self.regions.get(code)
        if region is not None:
            region.current_volume += order.volume
            region.pending_count += order.volume
            if order.counts_toward_forecast:
                region.forecast_next_30_days += order.sales_forecast
            region.recompute_status()

        self.logger.info(
            f"Intake order {order.order_id[:8]} for {code}: "
            f"{order.volume} cases over {order.window_days} days"
        )
        self._persist_order(order, region)

        self.close_order_form()
        self._notify(BoardEvent.ORDERS_CHANGED)
        self.apply_map_colors()
        return order

    def _persist_order(self, order: IntakeOrder, region: Optional[Region]) -> None:
        if self.db_manager is not None:
            try:
                self.db_manager.save_order_with_region(order, region)
            except Exception as e:
                self.logger.error(f"Failed to persist intake order {order.order_id}: {e}")

        if self.audit_logger:
            self.audit_logger.log_action(
                action_type=ActionType.INTAKE_ORDER_CREATED,
                actor=Actor.USER,
                details={
                    "region_code": order.region_code,
                    "volume": order.volume,
                    "sales_forecast": order.sales_forecast,
                    "window_days": order.window_days,
                },
                order_id=order.order_id,
            )
