from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QMainWindow, QMessageBox, QPushButton,
    QStackedWidget, QVBoxLayout, QWidget
)

from ..context import AppContext
from .intake_map_page import IntakeMapPage
from .retainers_page import RetainersPage
from .settings_page import SettingsPage
from ..utils import get_logger


class MainWindow(QMainWindow):
    def __init__(self, context: AppContext):
        super().__init__()
        self.setWindowTitle("Caseboard | Intake Operations")
        self.resize(
            context.config.get("ui.window_width", 1280),
            context.config.get("ui.window_height", 800),
        )
        self.setStyleSheet("background-color: #F2F2F7;")

        self.context = context
        self.logger = get_logger("main_window")

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QHBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(0, 0, 0, 0)
        self.main_layout.setSpacing(0)

        self._create_navigation_panel()
        self._create_content_area()
        self.navigate("intake_map")

    def _create_navigation_panel(self):
        self.nav_panel = QWidget()
        self.nav_panel.setFixedWidth(240)
        self.nav_panel.setStyleSheet("""
            QWidget { background-color: #FFFFFF; border-right: 1px solid #E5E5EA; }
            QPushButton {
                text-align: left; padding: 12px 20px; border: none;
                color: #1C1C1E; font-size: 14px; font-weight: 500; border-radius: 8px; margin: 4px 10px;
            }
            QPushButton:hover { background-color: #F2F2F7; }
            QPushButton:checked { background-color: #007AFF; color: white; }
        """)

        layout = QVBoxLayout(self.nav_panel)

        lbl_logo = QLabel("CASEBOARD")
        lbl_logo.setStyleSheet("color: #007AFF; font-size: 22px; font-weight: 900; padding: 25px 20px;")
        layout.addWidget(lbl_logo)

        self.nav_btns = {}

        nav_items = [
            ("intake_map", "Intake Map"),
            ("retainers", "Retainers"),
            ("settings", "Settings"),
        ]

        for key, label in nav_items:
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, k=key: self.navigate(k))
            layout.addWidget(btn)
            self.nav_btns[key] = btn

        layout.addStretch()
        self.main_layout.addWidget(self.nav_panel)

    def _update_nav_style(self, active_key):
        for key, btn in self.nav_btns.items():
            btn.setChecked(key == active_key)

    def _create_content_area(self):
        self.stack = QStackedWidget()

        self.pages = {
            "intake_map": IntakeMapPage(self.context),
            "retainers": RetainersPage(self.context),
            "settings": SettingsPage(self.context),
        }
        for page in self.pages.values():
            self.stack.addWidget(page)

        self.main_layout.addWidget(self.stack)

    def _confirm_discard(self) -> bool:
        reply = QMessageBox.question(
            self,
            "Unsaved Changes",
            "You have unsaved profile changes. Discard them and leave?",
            QMessageBox.StandardButton.Discard | QMessageBox.StandardButton.Cancel,
            QMessageBox.StandardButton.Cancel,
        )
        return reply == QMessageBox.StandardButton.Discard

    def navigate(self, key: str) -> bool:
        """Switch pages; leaving with unsaved profile edits asks first."""
        target = self.pages[key]
        current = self.stack.currentWidget()

        if current is not target and current is not None:
            if not self.context.profile_draft.request_leave(self._confirm_discard):
                self.logger.debug(f"Navigation to {key} cancelled")
                self._update_nav_style(self._current_key())
                return False

        self.stack.setCurrentWidget(target)
        self._update_nav_style(key)
        return True

    def _current_key(self):
        current = self.stack.currentWidget()
        for key, page in self.pages.items():
            if page is current:
                return key
        return None

    def closeEvent(self, event):
        if not self.context.profile_draft.request_leave(self._confirm_discard):
            event.ignore()
            return
        self.pages["intake_map"].teardown()
        super().closeEvent(event)
