"""Utility functions for catalogit.

Modules are imported directly (``from catalogit.utils.money import round2``)
so that the domain layer can depend on them without import cycles.
"""
