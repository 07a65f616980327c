"""
UI dialogs for Caseboard.
"""

from .order_dialog import OrderDialog

__all__ = ["OrderDialog"]
