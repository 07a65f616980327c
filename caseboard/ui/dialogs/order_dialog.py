"""
Intake order dialog.

Collects a new intake order and submits it to the intake board.
"""

from typing import Optional

from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)

from ...models import FORECAST_WINDOW_DAYS, WINDOW_DAY_OPTIONS, IntakeOrder
from ...services import IntakeBoard


class OrderDialog(QDialog):
    """Dialog for creating intake orders."""

    def __init__(self, board: IntakeBoard, region_code: Optional[str] = None, parent=None):
        """
        Initialize order dialog.

        Args:
            board: Intake board receiving the order
            region_code: Region to preselect (optional)
            parent: Parent widget
        """
        super().__init__(parent)
        self.board = board
        self.order: Optional[IntakeOrder] = None

        self.setWindowTitle("New Intake Order")
        self.setMinimumWidth(420)

        self._setup_ui()
        if region_code:
            self.region_input.setCurrentText(region_code.upper())

        self.board.open_order_form()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        title = QLabel("New Intake Order")
        title.setStyleSheet("font-size: 18px; font-weight: bold; margin-bottom: 10px;")
        layout.addWidget(title)

        form = QFormLayout()
        form.setSpacing(10)

        self.region_input = QComboBox()
        self.region_input.setEditable(True)
        for region in sorted(self.board.regions.values(), key=lambda r: r.code):
            self.region_input.addItem(region.code)
        self.region_input.setCurrentText("")
        form.addRow("Region*:", self.region_input)

        self.volume_input = QSpinBox()
        self.volume_input.setRange(0, 100000)
        self.volume_input.setValue(1)
        self.volume_input.setSuffix(" cases")
        form.addRow("Volume*:", self.volume_input)

        self.forecast_input = QSpinBox()
        self.forecast_input.setRange(0, 100000)
        form.addRow("Sales Forecast:", self.forecast_input)

        self.window_input = QComboBox()
        for days in WINDOW_DAY_OPTIONS:
            self.window_input.addItem(f"{days} days", days)
        self.window_input.setCurrentIndex(WINDOW_DAY_OPTIONS.index(FORECAST_WINDOW_DAYS))
        form.addRow("Window:", self.window_input)

        hint = QLabel("Only 30-day orders add to the region's forecast.")
        hint.setStyleSheet("color: #7f8c8d; font-size: 12px;")
        form.addRow("", hint)

        layout.addLayout(form)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        button_layout.addWidget(cancel_btn)

        self.submit_btn = QPushButton("Create Order")
        self.submit_btn.setStyleSheet("""
            QPushButton {
                background-color: #007AFF;
                color: white;
                padding: 8px 20px;
                font-weight: bold;
            }
            QPushButton:hover {
                background-color: #0062CC;
            }
        """)
        self.submit_btn.clicked.connect(self._on_submit)
        button_layout.addWidget(self.submit_btn)

        layout.addLayout(button_layout)

    def _on_submit(self) -> None:
        """Submit the order; invalid input leaves the dialog open unchanged."""
        self.order = self.board.create_order(
            region_code=self.region_input.currentText(),
            volume=self.volume_input.value(),
            sales_forecast=self.forecast_input.value(),
            window_days=self.window_input.currentData(),
        )
        if self.order is not None:
            self.accept()

    def reject(self) -> None:
        self.board.close_order_form()
        super().reject()

    def get_order(self) -> Optional[IntakeOrder]:
        """
        Get the created order.

        Returns:
            IntakeOrder or None if the dialog was cancelled
        """
        return self.order
