"""
Choropleth map widget.

Renders the intake board's map document with QSvgRenderer, loads it on a
worker thread and dispatches pointer events to the board's shape handlers.
"""

import math
from typing import Dict, Optional

from PyQt6.QtCore import QByteArray, QPointF, QRectF, Qt, QThread, pyqtSignal
from PyQt6.QtGui import QImage, QPainter
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtWidgets import QLabel, QSizePolicy, QWidget

from ..map import Bounds, MapDocumentLoader, ShapeHandle
from ..map.choropleth import STATUS_COLORS
from ..models import RegionStatus
from ..services import BoardEvent, IntakeBoard
from ..utils import get_logger

# Longest side, in pixels, of the coverage image rendered per shape for hit tests
HIT_MASK_SIZE = 128


class MapLoadWorker(QThread):
    """Worker thread running the map load protocol."""
    map_loaded = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(self, loader: MapDocumentLoader):
        super().__init__()
        self.loader = loader

    def run(self):
        try:
            self.map_loaded.emit(self.loader.load())
        except Exception as e:
            self.error_occurred.emit(str(e))


class ChoroplethWidget(QWidget):
    """Interactive status map of the intake regions."""

    def __init__(self, board: IntakeBoard, parent=None):
        super().__init__(parent)
        self.board = board
        self.logger = get_logger("choropleth_widget")

        self.renderer = QSvgRenderer(self)
        self.load_worker: Optional[MapLoadWorker] = None

        # Shape geometry in document coordinates, per loaded document
        self._geometry_renderer: Optional[QSvgRenderer] = None
        self._geometry_document = None
        self._shape_bounds: Dict[str, Bounds] = {}
        self._hit_masks: Dict[str, QImage] = {}

        self._hover_code: Optional[str] = None
        self._torn_down = False

        self.setMouseTracking(True)
        self.setMinimumSize(480, 320)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self.status_label = QLabel("Loading map...", self)
        self.status_label.setStyleSheet("color: #95a5a6; font-size: 14px;")

        self.tooltip_label = QLabel(self)
        self.tooltip_label.setTextFormat(Qt.TextFormat.RichText)
        self.tooltip_label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.tooltip_label.setStyleSheet("""
            QLabel {
                background-color: white;
                border: 1px solid #E5E5EA;
                border-radius: 8px;
                padding: 8px 10px;
                color: #1C1C1E;
                font-size: 12px;
            }
        """)
        self.tooltip_label.hide()

        self.board.set_bounds_provider(self._renderer_bounds)
        self.board.add_listener(self._on_board_event)

    # Loading

    def start_loading(self) -> None:
        """Fetch the map document in the background."""
        if self.board.loader is None or self.load_worker is not None:
            return
        self.load_worker = MapLoadWorker(self.board.loader)
        self.load_worker.map_loaded.connect(self._on_map_loaded)
        self.load_worker.error_occurred.connect(self._on_load_error)
        self.load_worker.finished.connect(self.load_worker.deleteLater)
        self.load_worker.start()

    def _on_map_loaded(self, loaded) -> None:
        self.load_worker = None
        if self._torn_down:
            self.logger.debug("Map loaded after teardown, result discarded")
            return
        try:
            self.board.mount_document(loaded)
        except Exception as e:
            self._on_load_error(str(e))

    def _on_load_error(self, message: str) -> None:
        self.load_worker = None
        self.logger.error(f"Map could not be loaded: {message}")
        if not self._torn_down:
            self.status_label.setText("Map unavailable")
            self.status_label.adjustSize()

    # Board notifications

    def _on_board_event(self, event: BoardEvent) -> None:
        if event == BoardEvent.COLORS_APPLIED:
            self._render_document()
        elif event == BoardEvent.TOOLTIP_CHANGED:
            self._update_tooltip()
        elif event == BoardEvent.ORDERS_CHANGED and self.tooltip_label.isVisible():
            self._update_tooltip()

    def _render_document(self) -> None:
        document = self.board.document
        if document is None:
            return
        self.renderer.load(QByteArray(document.to_bytes()))
        self.status_label.hide()
        self.update()

    def _geometry(self) -> Optional[QSvgRenderer]:
        """Renderer used for shape geometry, rebuilt once per document."""
        document = self.board.document
        if document is None:
            return None
        if self._geometry_document is not document:
            self._geometry_renderer = QSvgRenderer(QByteArray(document.to_bytes()))
            self._geometry_document = document
            self._shape_bounds = {}
            self._hit_masks = {}
        return self._geometry_renderer

    def _renderer_bounds(self, handle: ShapeHandle) -> Optional[Bounds]:
        """Bounding box of a shape in document coordinates."""
        if handle.code in self._shape_bounds and self._geometry_document is self.board.document:
            return self._shape_bounds[handle.code]

        renderer = self._geometry()
        if renderer is None or not renderer.elementExists(handle.element_id):
            return None

        rect = renderer.transformForElement(handle.element_id).mapRect(
            renderer.boundsOnElement(handle.element_id)
        )
        if rect.isEmpty():
            return None

        bounds = Bounds(rect.x(), rect.y(), rect.width(), rect.height())
        self._shape_bounds[handle.code] = bounds
        return bounds

    # Coordinates

    def _target_rect(self) -> QRectF:
        """Widget area the document is drawn into, aspect ratio kept."""
        view_box = self.renderer.viewBoxF()
        if view_box.isEmpty():
            return QRectF(self.rect())

        scale = min(self.width() / view_box.width(), self.height() / view_box.height())
        width = view_box.width() * scale
        height = view_box.height() * scale
        return QRectF((self.width() - width) / 2, (self.height() - height) / 2, width, height)

    def _to_document(self, pos: QPointF) -> Optional[QPointF]:
        view_box = self.renderer.viewBoxF()
        target = self._target_rect()
        if view_box.isEmpty() or target.isEmpty():
            return None
        x = view_box.x() + (pos.x() - target.x()) * view_box.width() / target.width()
        y = view_box.y() + (pos.y() - target.y()) * view_box.height() / target.height()
        return QPointF(x, y)

    def _hit_mask(self, handle: ShapeHandle, bounds: Bounds) -> Optional[QImage]:
        """Coverage image of one shape drawn alone over its bounding box."""
        mask = self._hit_masks.get(handle.code)
        if mask is not None:
            return mask
        renderer = self._geometry()
        if renderer is None:
            return None

        scale = HIT_MASK_SIZE / max(bounds.width, bounds.height)
        mask = QImage(
            max(1, math.ceil(bounds.width * scale)),
            max(1, math.ceil(bounds.height * scale)),
            QImage.Format.Format_ARGB32_Premultiplied,
        )
        mask.fill(Qt.GlobalColor.transparent)
        painter = QPainter(mask)
        renderer.render(painter, handle.element_id, QRectF(0, 0, mask.width(), mask.height()))
        painter.end()

        self._hit_masks[handle.code] = mask
        return mask

    def _covers(self, handle: ShapeHandle, bounds: Bounds, point: QPointF) -> bool:
        """Whether the shape's painted area, not just its box, contains the point."""
        mask = self._hit_mask(handle, bounds)
        if mask is None:
            return True
        px = int((point.x() - bounds.x) / bounds.width * mask.width())
        py = int((point.y() - bounds.y) / bounds.height * mask.height())
        px = min(max(px, 0), mask.width() - 1)
        py = min(max(py, 0), mask.height() - 1)
        return mask.pixelColor(px, py).alpha() > 0

    def _shape_at(self, pos: QPointF) -> Optional[str]:
        """Code of the smallest shape painted under the point."""
        point = self._to_document(pos)
        if point is None or self.board.document is None:
            return None

        candidates = []
        for code, handle in self.board.document.shapes.items():
            bounds = self._renderer_bounds(handle)
            if bounds is None or not bounds.contains(point.x(), point.y()):
                continue
            candidates.append((bounds.width * bounds.height, code, handle, bounds))

        for _, code, handle, bounds in sorted(candidates, key=lambda c: (c[0], c[1])):
            if self._covers(handle, bounds, point):
                return code
        return None

    # Qt events

    def paintEvent(self, event):
        if not self.renderer.isValid():
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.renderer.render(painter, self._target_rect())
        painter.end()

    def mouseMoveEvent(self, event):
        if self._torn_down:
            return
        pos = event.position()
        code = self._shape_at(pos)

        if code != self._hover_code:
            if self._hover_code:
                self.board.pointer_leave(self._hover_code)
            if code:
                self.board.pointer_enter(code)
            self._hover_code = code
            if self.board.is_interactive(code):
                self.setCursor(Qt.CursorShape.PointingHandCursor)
            else:
                self.unsetCursor()

        position = self.board.pointer_move(
            pos.x(),
            pos.y(),
            (self.tooltip_label.width(), self.tooltip_label.height()),
            (self.width(), self.height()),
        )
        if position is not None:
            tooltip = self.board.tooltip
            if (tooltip.width, tooltip.height) != (self.tooltip_label.width(), self.tooltip_label.height()):
                self.tooltip_label.resize(int(tooltip.width), int(tooltip.height))
            self.tooltip_label.move(int(position[0]), int(position[1]))

    def leaveEvent(self, event):
        if self._hover_code:
            self.board.pointer_leave(self._hover_code)
            self._hover_code = None
        self.unsetCursor()
        super().leaveEvent(event)

    def _update_tooltip(self) -> None:
        content = self.board.tooltip.content
        if content is None:
            self.tooltip_label.hide()
            return

        color = STATUS_COLORS.get(RegionStatus(content.status), "#95a5a6")
        self.tooltip_label.setText(
            f"<b>{content.title}</b><br>"
            f"<span style='color: {color}; font-weight: bold;'>{content.status_label}</span><br>"
            f"{content.volume_line}<br>"
            f"{content.forecast_line}<br>"
            f"{content.counts_line}"
        )
        self.tooltip_label.adjustSize()
        self.tooltip_label.raise_()
        self.tooltip_label.show()

    # Teardown

    def teardown(self) -> None:
        """Detach every handler; an in-flight load finishes and is discarded."""
        if self._torn_down:
            return
        self._torn_down = True
        self.setMouseTracking(False)
        self.board.remove_listener(self._on_board_event)
        self.board.set_bounds_provider(None)
        self.board.teardown()
        self.tooltip_label.hide()
        self.logger.debug("Choropleth widget torn down")

    def closeEvent(self, event):
        self.teardown()
        super().closeEvent(event)
