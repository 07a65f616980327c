"""
Settings page for the attorney profile.

Each tab edits its own subset of the shared profile draft and saves only
those fields.
"""

from typing import Any, Dict, List

from PyQt6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTabWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..backend import BackendError, ProfileNotFoundError
from ..context import AppContext
from ..models import ProfileTab, fields_for_tab
from ..services import DraftEvent, ProfileDraft
from ..utils import get_logger

# Field name -> (label, control kind)
FIELD_CONTROLS = {
    "full_name": ("Full Name", "text"),
    "firm_name": ("Firm", "text"),
    "email": ("Email", "text"),
    "phone": ("Phone", "text"),
    "bar_number": ("Bar Number", "text"),
    "office_state": ("Office State", "text"),
    "bio": ("Bio", "multiline"),
    "practice_areas": ("Practice Areas", "list"),
    "languages": ("Languages", "list"),
    "licensed_states": ("Licensed States", "list"),
    "years_experience": ("Years of Experience", "int"),
    "accepting_new_cases": ("Accepting New Cases", "bool"),
    "max_active_cases": ("Max Active Cases", "int"),
    "weekly_intake_limit": ("Weekly Intake Limit", "int"),
    "availability_notes": ("Availability Notes", "multiline"),
}

TAB_TITLES = {
    ProfileTab.GENERAL: "General",
    ProfileTab.EXPERTISE: "Expertise",
    ProfileTab.CAPACITY: "Capacity",
}

INPUT_STYLE = """
    QLineEdit, QSpinBox, QTextEdit {
        padding: 6px;
        border: 2px solid #bdc3c7;
        border-radius: 5px;
        font-size: 14px;
    }
    QLineEdit:focus, QSpinBox:focus, QTextEdit:focus {
        border: 2px solid #3498db;
    }
    QLineEdit:disabled, QSpinBox:disabled, QTextEdit:disabled {
        background-color: #F2F2F7;
        color: #636366;
    }
"""


def split_list(text: str) -> List[str]:
    """Parse a comma-separated list field."""
    return [part.strip() for part in text.split(",") if part.strip()]


class ProfileTabWidget(QWidget):
    """Edit/Cancel/Save form over one tab's fields of the draft."""

    def __init__(self, draft: ProfileDraft, tab: ProfileTab, parent=None):
        super().__init__(parent)
        self.draft = draft
        self.tab = tab
        self.fields = fields_for_tab(tab)
        self.logger = get_logger(f"settings_{tab.value}")

        self.controls: Dict[str, QWidget] = {}
        self._populating = False
        self._committing = False

        self._setup_ui()
        self.draft.add_listener(self._on_draft_event)
        self._sync_from_draft()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(15, 15, 15, 15)
        layout.setSpacing(20)

        group = QGroupBox(TAB_TITLES[self.tab])
        group.setStyleSheet("""
            QGroupBox {
                font-weight: bold;
                border: 2px solid #bdc3c7;
                border-radius: 5px;
                margin-top: 10px;
                padding-top: 10px;
            }
            QGroupBox::title {
                subcontrol-origin: margin;
                left: 10px;
                padding: 0 5px 0 5px;
            }
        """)
        form = QFormLayout()
        form.setSpacing(12)

        for name in self.fields:
            label, kind = FIELD_CONTROLS[name]
            control = self._create_control(name, kind)
            self.controls[name] = control
            form.addRow(f"{label}:", control)

        group.setLayout(form)
        layout.addWidget(group)

        # Action buttons
        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self.edit_btn = QPushButton("Edit")
        self.edit_btn.clicked.connect(self._on_edit)
        button_layout.addWidget(self.edit_btn)

        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.clicked.connect(self._on_cancel)
        button_layout.addWidget(self.cancel_btn)

        self.save_btn = QPushButton("Save")
        self.save_btn.setStyleSheet("""
            QPushButton {
                background-color: #3498db;
                color: white;
                padding: 8px 20px;
                font-weight: bold;
                border-radius: 5px;
            }
            QPushButton:hover {
                background-color: #2980b9;
            }
            QPushButton:disabled {
                background-color: #bdc3c7;
            }
        """)
        self.save_btn.clicked.connect(self._on_save)
        button_layout.addWidget(self.save_btn)

        layout.addLayout(button_layout)
        layout.addStretch()

    def _create_control(self, name: str, kind: str) -> QWidget:
        if kind == "bool":
            control = QCheckBox()
            control.stateChanged.connect(lambda _, n=name: self._on_control_changed(n))
        elif kind == "int":
            control = QSpinBox()
            control.setRange(0, 1000)
            control.valueChanged.connect(lambda _, n=name: self._on_control_changed(n))
        elif kind == "multiline":
            control = QTextEdit()
            control.setFixedHeight(90)
            control.textChanged.connect(lambda n=name: self._on_control_changed(n))
        else:
            control = QLineEdit()
            if kind == "list":
                control.setPlaceholderText("Comma separated")
            control.textChanged.connect(lambda _, n=name: self._on_control_changed(n))
        control.setStyleSheet(INPUT_STYLE)
        return control

    def _control_value(self, name: str) -> Any:
        control = self.controls[name]
        kind = FIELD_CONTROLS[name][1]
        if kind == "bool":
            return control.isChecked()
        if kind == "int":
            return control.value()
        if kind == "multiline":
            return control.toPlainText()
        if kind == "list":
            return split_list(control.text())
        return control.text()

    def _set_control_value(self, name: str, value: Any) -> None:
        control = self.controls[name]
        kind = FIELD_CONTROLS[name][1]
        if kind == "bool":
            control.setChecked(bool(value))
        elif kind == "int":
            control.setValue(int(value or 0))
        elif kind == "multiline":
            if control.toPlainText() != (value or ""):
                control.setPlainText(value or "")
        elif kind == "list":
            text = ", ".join(value or [])
            if split_list(control.text()) != list(value or []):
                control.setText(text)
        elif control.text() != (value or ""):
            control.setText(value or "")

    def _on_control_changed(self, name: str) -> None:
        if self._populating or not self.draft.is_editing:
            return
        self.draft.set(name, self._control_value(name))

    def _on_draft_event(self, event: DraftEvent, field=None) -> None:
        if event == DraftEvent.FIELD_CHANGED and field not in self.fields:
            return
        self._sync_from_draft()

    def _sync_from_draft(self) -> None:
        """Refresh controls and button states from the draft."""
        self._populating = True
        try:
            if self.draft.is_loaded:
                for name in self.fields:
                    self._set_control_value(name, self.draft.get(name))
        finally:
            self._populating = False

        editing = self.draft.is_editing and not self._committing
        for control in self.controls.values():
            control.setEnabled(editing)
        self.edit_btn.setEnabled(self.draft.is_loaded and not self.draft.is_editing)
        self.cancel_btn.setEnabled(editing)
        self.save_btn.setEnabled(editing)

    def _on_edit(self):
        self.draft.start_editing()

    def _on_cancel(self):
        self.draft.cancel_editing()

    def _on_save(self):
        errors = self.draft.validate(self.fields)
        if errors:
            QMessageBox.warning(self, "Validation Error", "\n".join(errors))
            return

        self._committing = True
        self._sync_from_draft()
        try:
            self.draft.commit_editing(self.draft.owner_id, self.fields)
        except BackendError as e:
            self.logger.error(f"Failed to save {self.tab.value} settings: {e}")
            QMessageBox.critical(
                self,
                "Save Failed",
                f"Failed to save settings:\n{str(e)}"
            )
        finally:
            self._committing = False
            self._sync_from_draft()


class SettingsPage(QWidget):
    """Profile settings page with one tab per field group."""

    def __init__(self, context: AppContext, parent=None):
        super().__init__(parent)
        self.context = context
        self.draft = context.profile_draft
        self.logger = get_logger("settings_page")

        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(15)

        header = QLabel("Settings")
        header.setStyleSheet("""
            QLabel {
                font-size: 24px;
                font-weight: bold;
                color: #2c3e50;
            }
        """)
        layout.addWidget(header)

        session = self.context.session
        self.session_label = QLabel(f"Signed in as {session.owner_id} ({session.role.value})")
        self.session_label.setStyleSheet("color: #7f8c8d; font-size: 13px;")
        layout.addWidget(self.session_label)

        self.tabs = QTabWidget()
        self.tabs.setStyleSheet("""
            QTabWidget::pane {
                border: 1px solid #bdc3c7;
                border-radius: 5px;
                background: white;
            }
            QTabBar::tab {
                background: #ecf0f1;
                padding: 12px 24px;
                margin-right: 2px;
                border-top-left-radius: 5px;
                border-top-right-radius: 5px;
                font-size: 14px;
            }
            QTabBar::tab:selected {
                background: white;
                border-bottom: 3px solid #3498db;
            }
            QTabBar::tab:hover {
                background: #d5dbdb;
            }
        """)

        self.tab_widgets = {}
        for tab in ProfileTab:
            widget = ProfileTabWidget(self.draft, tab)
            self.tab_widgets[tab] = widget
            self.tabs.addTab(widget, TAB_TITLES[tab])

        layout.addWidget(self.tabs)

    def showEvent(self, event):
        super().showEvent(event)
        self._load_profile()

    def _load_profile(self):
        """Load the profile; a clean stale edit is reconciled by the draft."""
        try:
            self.draft.load_profile(self.context.session.owner_id)
        except ProfileNotFoundError:
            self.logger.warning(f"No profile for {self.context.session.owner_id}")
            self.session_label.setText(
                f"No profile found for {self.context.session.owner_id}. "
                "Run scripts/init_db.py to create one."
            )
        except BackendError as e:
            self.logger.error(f"Failed to load profile: {e}")
            QMessageBox.warning(self, "Error", f"Could not load profile:\n{e}")
