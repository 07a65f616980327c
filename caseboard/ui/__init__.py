"""
User interface components for Caseboard.
"""

from .main_window import MainWindow
from .intake_map_page import IntakeMapPage

__all__ = ["MainWindow", "IntakeMapPage"]
