"""
Intake map page.

Status filter, volume summary, the choropleth map and the recent order list.
"""

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..context import AppContext
from ..map.choropleth import STATUS_COLORS
from ..models import RegionStatus, StatusFilter
from ..services import BoardEvent
from ..utils import get_logger
from .choropleth_widget import ChoroplethWidget
from .dialogs import OrderDialog

RECENT_ORDER_LIMIT = 25


class StatCard(QFrame):
    """A small card showing one summary figure."""

    def __init__(self, label: str, initial_value: str, color_hex: str):
        super().__init__()
        self.setFrameStyle(QFrame.Shape.NoFrame)
        self.setStyleSheet("""
            QFrame {
                background-color: white;
                border: 1px solid #E5E5E5;
                border-radius: 12px;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(15, 10, 15, 10)
        layout.setSpacing(4)

        lbl_title = QLabel(label)
        lbl_title.setStyleSheet("color: #666; font-weight: 600; font-size: 12px; border: none;")

        self.lbl_value = QLabel(initial_value)
        self.lbl_value.setStyleSheet(f"color: {color_hex}; font-weight: bold; font-size: 20px; border: none;")

        layout.addWidget(lbl_title)
        layout.addWidget(self.lbl_value)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(15)
        shadow.setColor(QColor(0, 0, 0, 20))
        shadow.setOffset(0, 2)
        self.setGraphicsEffect(shadow)

    def update_value(self, value):
        self.lbl_value.setText(str(value))


class IntakeMapPage(QWidget):
    """Regional intake status page."""

    def __init__(self, context: AppContext, parent=None):
        super().__init__(parent)
        self.context = context
        self.board = context.intake_board
        self.logger = get_logger("intake_map_page")

        self.filter_buttons = {}
        self.stat_cards = {}

        self._setup_ui()
        self.board.add_listener(self._on_board_event)
        self._refresh()
        self.map_widget.start_loading()

    def _setup_ui(self):
        self.setStyleSheet("background-color: #F5F7FA;")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(30, 30, 30, 30)
        layout.setSpacing(15)

        # Header
        header_layout = QHBoxLayout()
        header = QLabel("Intake Map")
        header.setStyleSheet("font-size: 24px; font-weight: bold; color: #1C1C1E;")
        header_layout.addWidget(header)
        header_layout.addStretch()

        self.source_label = QLabel("")
        self.source_label.setStyleSheet("color: #95a5a6; font-size: 11px;")
        header_layout.addWidget(self.source_label)

        btn_new = QPushButton("New Intake Order")
        btn_new.setStyleSheet("""
            QPushButton {
                background-color: #007AFF; color: white; padding: 8px 16px;
                border-radius: 6px; font-weight: bold;
            }
            QPushButton:hover { background-color: #0062CC; }
        """)
        btn_new.clicked.connect(self._open_order_dialog)
        header_layout.addWidget(btn_new)
        layout.addLayout(header_layout)

        # Status filter
        filter_layout = QHBoxLayout()
        for status_filter in StatusFilter:
            btn = QPushButton(status_filter.value.title())
            btn.setCheckable(True)
            btn.setStyleSheet("""
                QPushButton {
                    padding: 6px 14px; border: 1px solid #E5E5EA; border-radius: 14px;
                    background-color: white; color: #1C1C1E;
                }
                QPushButton:checked { background-color: #1C1C1E; color: white; }
            """)
            btn.clicked.connect(lambda checked, f=status_filter: self.board.set_status_filter(f))
            filter_layout.addWidget(btn)
            self.filter_buttons[status_filter] = btn
        filter_layout.addStretch()
        layout.addLayout(filter_layout)

        # Summary cards
        stats_layout = QHBoxLayout()
        stats_layout.setSpacing(15)
        stats_config = [
            ("current_volume", "Current Volume", "#007AFF"),
            ("target_volume", "Target Volume", "#1C1C1E"),
            ("forecast_next_30_days", "30-Day Forecast", "#8E44AD"),
            ("pending_count", "Pending", STATUS_COLORS[RegionStatus.LOW]),
            ("fulfilled_count", "Fulfilled", STATUS_COLORS[RegionStatus.ACTIVE]),
        ]
        for key, label, color in stats_config:
            card = StatCard(label, "-", color)
            self.stat_cards[key] = card
            stats_layout.addWidget(card)
        layout.addLayout(stats_layout)

        # Map and recent orders
        body_layout = QHBoxLayout()
        body_layout.setSpacing(15)

        self.map_widget = ChoroplethWidget(self.board)
        body_layout.addWidget(self.map_widget, stretch=3)

        orders_panel = QVBoxLayout()
        orders_title = QLabel("Recent Orders")
        orders_title.setStyleSheet("font-size: 16px; font-weight: bold; color: #2c3e50;")
        orders_panel.addWidget(orders_title)

        self.orders_table = QTableWidget()
        self.orders_table.setColumnCount(4)
        self.orders_table.setHorizontalHeaderLabels(["Region", "Volume", "Forecast", "Window"])
        self.orders_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.orders_table.verticalHeader().setVisible(False)
        self.orders_table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.orders_table.setStyleSheet("""
            QTableWidget {
                border: 1px solid #E5E5EA;
                border-radius: 8px;
                background-color: white;
            }
            QHeaderView::section {
                background-color: #F2F2F7;
                padding: 6px;
                border: none;
                font-weight: bold;
            }
        """)
        orders_panel.addWidget(self.orders_table)
        body_layout.addLayout(orders_panel, stretch=2)

        layout.addLayout(body_layout, stretch=1)

    def _on_board_event(self, event: BoardEvent) -> None:
        if event in (BoardEvent.COLORS_APPLIED, BoardEvent.ORDERS_CHANGED, BoardEvent.MAP_LOADED):
            self._refresh()

    def _refresh(self):
        counts = self.board.status_counts()
        for status_filter, btn in self.filter_buttons.items():
            btn.setChecked(status_filter == self.board.status_filter)
            if status_filter == StatusFilter.ALL:
                btn.setText(f"All ({len(self.board.regions)})")
            else:
                btn.setText(f"{status_filter.value.title()} ({counts[RegionStatus(status_filter.value)]})")

        for key, value in self.board.totals().items():
            if key in self.stat_cards:
                self.stat_cards[key].update_value(f"{value:,}")

        if self.board.source is not None:
            self.source_label.setText(f"Map source: {self.board.source.value}")

        orders = self.board.orders[:RECENT_ORDER_LIMIT]
        self.orders_table.setRowCount(len(orders))
        for row, order in enumerate(orders):
            self.orders_table.setItem(row, 0, QTableWidgetItem(order.region_code))
            self.orders_table.setItem(row, 1, QTableWidgetItem(str(order.volume)))
            forecast_item = QTableWidgetItem(str(order.sales_forecast))
            if not order.counts_toward_forecast:
                forecast_item.setForeground(Qt.GlobalColor.gray)
            self.orders_table.setItem(row, 2, forecast_item)
            self.orders_table.setItem(row, 3, QTableWidgetItem(f"{order.window_days}d"))

    def _open_order_dialog(self):
        region_code = self.board.tooltip.region.code if self.board.tooltip.region else None
        dialog = OrderDialog(self.board, region_code=region_code, parent=self)
        if dialog.exec():
            order = dialog.get_order()
            if order:
                self.logger.info(f"Created order {order.order_id[:8]} from dialog")

    def teardown(self):
        self.board.remove_listener(self._on_board_event)
        self.map_widget.teardown()
