from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..backend import BackendError
from ..context import AppContext
from ..models import RetainerStatus
from ..utils import get_logger


class RetainersPage(QWidget):
    """Read-only listing of the retainers visible to the signed-in user."""

    def __init__(self, context: AppContext, parent=None):
        super().__init__(parent)
        self.context = context
        self.retainer_service = context.retainer_service
        self.logger = get_logger("retainers_page")
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(30, 30, 30, 30)

        # Header
        session = self.context.session
        scope = "Organization" if session.sees_organization else "My"
        header = QLabel(f"{scope} Retainers")
        header.setStyleSheet("font-size: 24px; font-weight: bold; color: #1C1C1E;")
        layout.addWidget(header)

        # Filters
        filter_layout = QHBoxLayout()
        self.status_filter = QComboBox()
        self.status_filter.addItem("All statuses", None)
        for status in RetainerStatus:
            self.status_filter.addItem(status.value.title(), status)
        self.status_filter.currentIndexChanged.connect(self._refresh_retainers)
        filter_layout.addWidget(self.status_filter)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search client or case type")
        self.search_input.returnPressed.connect(self._refresh_retainers)
        filter_layout.addWidget(self.search_input, stretch=1)

        btn_refresh = QPushButton("Refresh List")
        btn_refresh.setFixedWidth(120)
        btn_refresh.clicked.connect(self._refresh_retainers)
        filter_layout.addWidget(btn_refresh)
        layout.addLayout(filter_layout)

        self.summary_label = QLabel("")
        self.summary_label.setStyleSheet("color: #7f8c8d; font-size: 13px;")
        layout.addWidget(self.summary_label)

        # Table
        self.table = QTableWidget()
        self.table.setColumnCount(6)
        self.table.setHorizontalHeaderLabels(["Client", "Case Type", "Region", "Status", "Fee", "Created"])
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self.table.setStyleSheet("""
            QTableWidget {
                border: 1px solid #E5E5EA;
                border-radius: 8px;
                background-color: white;
                selection-background-color: #E5F1FB;
                selection-color: black;
            }
            QHeaderView::section {
                background-color: #F2F2F7;
                padding: 8px;
                border: none;
                font-weight: bold;
            }
        """)
        layout.addWidget(self.table)

    def showEvent(self, event):
        super().showEvent(event)
        self._refresh_retainers()

    def _refresh_retainers(self):
        try:
            retainers = self.retainer_service.list_for_session(
                self.context.session,
                status=self.status_filter.currentData(),
                search=self.search_input.text(),
            )
        except BackendError as e:
            self.logger.error(f"Failed to list retainers: {e}")
            QMessageBox.warning(self, "Error", f"Could not load retainers:\n{e}")
            return

        summary = self.retainer_service.summarize(retainers)
        self.summary_label.setText(
            f"{summary['total']} retainers, "
            f"{summary['counts'][RetainerStatus.PENDING.value]} pending, "
            f"${summary['total_fees']:,.2f} in fees"
        )

        self.table.setRowCount(len(retainers))
        for row, retainer in enumerate(retainers):
            self.table.setItem(row, 0, QTableWidgetItem(retainer.client_name))
            self.table.setItem(row, 1, QTableWidgetItem(retainer.case_type or "-"))
            self.table.setItem(row, 2, QTableWidgetItem(retainer.region_code or "-"))

            status_item = QTableWidgetItem(retainer.status.value.title())
            if retainer.status == RetainerStatus.PENDING:
                status_item.setForeground(Qt.GlobalColor.darkYellow)
            self.table.setItem(row, 3, status_item)

            self.table.setItem(row, 4, QTableWidgetItem(f"${retainer.fee_amount:,.2f}"))
            date_str = retainer.created_at.strftime("%Y-%m-%d") if retainer.created_at else "-"
            self.table.setItem(row, 5, QTableWidgetItem(date_str))
