"""Sense360 Flash device registry server"""

__version__ = "1.0.0"
