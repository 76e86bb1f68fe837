"""Data loading utilities for bdmodels."""

from .loaders import load_matrix

__all__ = ["load_matrix"]
