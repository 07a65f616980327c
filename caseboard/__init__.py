"""
Caseboard: regional intake dashboard for legal case operations.
"""

__version__ = "0.1.0"
