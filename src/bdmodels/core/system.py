"""System description handed to a solver.

A :class:`System` bundles what a host needs to run a model: the dynamics
object (which owns the pure vector field), its numeric parameters, the
initial state, the lag declaration for delay models, a default time span and
the preferred solvers. Display metadata is kept in a separate optional
:class:`~bdmodels.core.display.DisplayConfig`.
"""

from typing import TYPE_CHECKING, Callable, Optional, Sequence, Tuple

import jax.numpy as jnp

from .bunch import Bunch
from .display import DisplayConfig

if TYPE_CHECKING:
    from ..dynamics.base import AbstractDynamics


class System:
    """Numeric description of one model instance.

    Args:
        dynamics: Dynamics object providing ``dynamics(t, state, ...)``
        params: Parameter Bunch passed to the vector field
        initial_state: Initial potentials [n_nodes]
        lags: Per-connection delays [n_nodes, n_nodes] for delay models,
            ``None`` for ODEs
        tspan: Default integration interval ``(t0, t1)``
        solvers: Preferred solvers, the first one is the default
        display: Optional GUI metadata

    Raises:
        ValueError: If the state, parameters or lags disagree on the number
            of nodes, or if lags are negative or non-finite.

    Example:
        >>> system = HopfieldNet.system(HopfieldNet.random_weights(20))
        >>> system.n_nodes
        20
        >>> result = solve(system)
    """

    def __init__(
        self,
        dynamics: "AbstractDynamics",
        params: Bunch,
        initial_state: jnp.ndarray,
        lags: Optional[jnp.ndarray] = None,
        tspan: Tuple[float, float] = (0.0, 100.0),
        solvers: Sequence = (),
        display: Optional[DisplayConfig] = None,
    ):
        self.dynamics = dynamics
        self.params = Bunch(params)
        self.initial_state = jnp.asarray(initial_state)
        self.tspan = (float(tspan[0]), float(tspan[1]))
        self.solvers = tuple(solvers)
        self.display = display

        if self.initial_state.ndim != 1:
            raise ValueError(
                f"Initial state must be 1D [n_nodes], got shape {self.initial_state.shape}"
            )
        self._n_nodes = self.initial_state.shape[0]
        if self._n_nodes < 1:
            raise ValueError("A system needs at least one node")

        dynamics.check_params(self.params, self._n_nodes)

        if lags is None:
            self.lags = None
            self._max_lag = 0.0
        else:
            self.lags = jnp.asarray(lags)
            if self.lags.shape != (self._n_nodes, self._n_nodes):
                raise ValueError(
                    f"Lag matrix shape {self.lags.shape} must be "
                    f"{(self._n_nodes, self._n_nodes)}"
                )
            if not jnp.all(jnp.isfinite(self.lags)):
                raise ValueError("Lag matrix contains non-finite values")
            if jnp.any(self.lags < 0):
                raise ValueError("Lag matrix contains negative values")
            self._max_lag = float(jnp.max(self.lags))

        if dynamics.DELAYED and self.lags is None:
            raise ValueError(
                f"{dynamics.__class__.__name__} is a delay model and needs a lag matrix"
            )
        if not dynamics.DELAYED and self.lags is not None:
            raise ValueError(
                f"{dynamics.__class__.__name__} is an ODE model and takes no lags"
            )

    @property
    def n_nodes(self) -> int:
        """Number of neurons."""
        return self._n_nodes

    @property
    def is_delayed(self) -> bool:
        """Whether the vector field reads a lag-history block."""
        return self.lags is not None

    @property
    def max_lag(self) -> float:
        return self._max_lag

    @property
    def flat_lags(self) -> Optional[jnp.ndarray]:
        """Lag declaration as seen by the solver, one entry per connection."""
        if self.lags is None:
            return None
        from ..utils.history import flatten_lags

        return flatten_lags(self.lags)

    @property
    def vector_field(self) -> Callable:
        """The pure evolution function ``f(t, V, [Z,] params)``."""
        return self.dynamics.dynamics

    def replace(self, **changes) -> "System":
        """Return a copy with some fields replaced.

        Args:
            **changes: Any of the constructor arguments

        Returns:
            New System; the original is left untouched
        """
        fields = dict(
            dynamics=self.dynamics,
            params=self.params.copy(),
            initial_state=self.initial_state,
            lags=self.lags,
            tspan=self.tspan,
            solvers=self.solvers,
            display=self.display,
        )
        for key in changes:
            if key not in fields:
                raise ValueError(
                    f"Unknown System field '{key}'. Available fields: {list(fields)}"
                )
        fields.update(changes)
        return System(**fields)

    def __repr__(self) -> str:
        lag_str = f", max_lag={self.max_lag:.3f}" if self.is_delayed else ""
        return (
            f"{self.__class__.__name__}("
            f"dynamics={self.dynamics.__class__.__name__}, "
            f"n_nodes={self.n_nodes}, "
            f"tspan={self.tspan}"
            f"{lag_str})"
        )
