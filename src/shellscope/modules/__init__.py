"""Parsing bricks for shellscope.

Each module is self-contained and exposes its public API via ``__all__``.
"""
