"""Solver implementations for bdmodels."""

from .base import AbstractSolver, NativeSolver
from .diffrax import DiffraxSolver
from .native import Euler, Heun, RungeKutta4

__all__ = [
    "AbstractSolver",
    "NativeSolver",
    "DiffraxSolver",
    "Euler",
    "Heun",
    "RungeKutta4",
]
