"""Base solver classes for bdmodels.

This module defines the abstract base classes for all solver types.
"""

from abc import ABC, abstractmethod
from typing import Callable

import jax.numpy as jnp

from ..core.bunch import Bunch


class AbstractSolver(ABC):
    """Base class for all solver types."""
    pass


class NativeSolver(AbstractSolver):
    """Base class for fixed-step solvers driven by ``jax.lax.scan``.

    Solvers integrate only the model state. For delay models the history
    lookup is bundled into ``dynamics_fn`` via closure, so every stage
    evaluation sees the lag-history block for its own stage time.
    """

    @abstractmethod
    def step(
        self,
        dynamics_fn: Callable,
        t: float,
        state: jnp.ndarray,
        dt: float,
        params: Bunch,
    ) -> jnp.ndarray:
        """Single integration step.

        Args:
            dynamics_fn: Vector field (t, state, params) -> derivatives
            t: Current time
            state: Current state [n_nodes]
            dt: Timestep
            params: Model parameters

        Returns:
            next_state: Updated state [n_nodes]
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
