"""Core components of bdmodels."""

from .bunch import Bunch
from .display import DisplayConfig
from .system import System

__all__ = ["Bunch", "DisplayConfig", "System"]
