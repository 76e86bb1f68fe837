"""bdmodels - Neural network models for brain dynamics simulation hosts."""

try:
    from importlib.metadata import version
    __version__ = version("bdmodels")
except Exception:
    __version__ = "unknown"

from .core import Bunch, DisplayConfig, System
from .data import load_matrix
from .dynamics import (
    HopfieldNet,
    NeuralNetDDE,
    hopfield_vector_field,
    neural_net_dde_vector_field,
)
from .solve import prepare, solve

__all__ = [
    "Bunch",
    "DisplayConfig",
    "System",
    "HopfieldNet",
    "NeuralNetDDE",
    "hopfield_vector_field",
    "neural_net_dde_vector_field",
    "load_matrix",
    "prepare",
    "solve",
]
