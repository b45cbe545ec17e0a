"""
Console Module

Command-line administration for store files.

This module provides:
- YAML-based store configuration loading
- CLI for insert/find/update/delete and password rotation
"""

__version__ = "0.1.0"
