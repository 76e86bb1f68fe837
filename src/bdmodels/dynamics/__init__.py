"""Neural network models."""

from .base import AbstractDynamics
from .hopfield import HopfieldNet, hopfield_vector_field
from .neural_net_dde import NeuralNetDDE, neural_net_dde_vector_field

__all__ = [
    "AbstractDynamics",
    "HopfieldNet",
    "NeuralNetDDE",
    "hopfield_vector_field",
    "neural_net_dde_vector_field",
]
