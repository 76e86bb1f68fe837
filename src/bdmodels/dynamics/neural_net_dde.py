"""Firing-rate network with one transmission delay per connection.

Every connection (i, j) carries its own delay, so a network of n neurons
declares n^2 lags and the solver evaluates the whole potential vector at
each of them. Practical only for small networks (n < 6 or so).
"""

from typing import Optional

import jax
import jax.numpy as jnp

from ..core.bunch import Bunch
from ..core.display import DisplayConfig
from ..core.system import System
from ..solvers import Heun
from ..utils.history import extract_lagged_values
from .base import AbstractDynamics, check_matrix, check_vector


def neural_net_dde_vector_field(
    t: float,
    V: jnp.ndarray,
    Z: jnp.ndarray,
    Kij: jnp.ndarray,
    a: float,
    Ie: jnp.ndarray,
    tau: float,
) -> jnp.ndarray:
    """Right-hand side of the per-connection delay network.

    ``dV_i = (-V_i + sigmoid(a * sum_j Kij[i, j] * Vij[i, j] + Ie_i)) / tau``
    where ``Vij`` is decoded from the history block by
    :func:`~bdmodels.utils.history.extract_lagged_values`.

    Args:
        t: Current time (unused, the system is autonomous)
        V: Current firing rates [n]
        Z: Lag-history block [n, n^2] for the lags of
            :func:`~bdmodels.utils.history.flatten_lags`
        Kij: Coupling matrix [n, n]
        a: Coupling scale
        Ie: Injection currents [n]
        tau: Time constant

    Returns:
        dV: Derivatives [n]

    Raises:
        ValueError: On any dimension mismatch or a malformed history block
    """
    del t
    V, Kij, Ie = jnp.asarray(V), jnp.asarray(Kij), jnp.asarray(Ie)
    if V.ndim != 1:
        raise ValueError(f"V must be 1D [n], got shape {V.shape}")
    n = V.shape[0]
    check_matrix("Kij", Kij, n)
    check_vector("Ie", Ie, n)
    Vij = extract_lagged_values(Z)
    if Vij.shape[0] != n:
        raise ValueError(
            f"History block describes {Vij.shape[0]} neurons but V has {n}"
        )

    Uij = Kij * Vij
    return (-V + jax.nn.sigmoid(a * jnp.sum(Uij, axis=1) + Ie)) / tau


class NeuralNetDDE(AbstractDynamics):
    """Time-delayed firing-rate network with per-connection delays.

    Notes
    -----
    **State equation:**

    $$
    \\tau \\dot V_i(t) = -V_i(t) + F\\Big(a \\sum_j K_{ij} V_{ij}(t) + I_i\\Big)
    $$

    with $F(v) = 1 / (1 + e^{-v})$ and $V_{ij}$ the lagged value picked for
    connection (i, j) out of the history block.

    Attributes
    ----------
    DEFAULT_PARAMS : Bunch
        ``a=1.0`` (replaced by ``1/n`` in :meth:`system` unless given),
        ``tau=10.0``
    NODE_PARAMS : dict
        ``Kij`` [n, n] and ``Ie`` [n]
    """

    DEFAULT_PARAMS = Bunch(
        a=1.0,  # Coupling scale
        tau=10.0,  # Time constant
    )

    NODE_PARAMS = {
        "Kij": 2,
        "Ie": 1,
    }

    DELAYED = True

    TSPAN = (0.0, 20.0)

    def dynamics(
        self, t: float, state: jnp.ndarray, Z: jnp.ndarray, params: Bunch
    ) -> jnp.ndarray:
        """Compute delayed network derivatives.

        Parameters
        ----------
        t : float
            Current time (unused)
        state : jnp.ndarray
            Firing rates with shape ``[n]``
        Z : jnp.ndarray
            Lag-history block with shape ``[n, n^2]``
        params : Bunch
            ``Kij``, ``a``, ``Ie``, ``tau``

        Returns
        -------
        derivatives : jnp.ndarray
            Shape ``[n]``
        """
        return neural_net_dde_vector_field(
            t, state, Z, params.Kij, params.a, params.Ie, params.tau
        )

    @classmethod
    def system(
        cls,
        n_nodes: int,
        key: Optional[jax.random.PRNGKey] = None,
        Kij: Optional[jnp.ndarray] = None,
        Ie: Optional[jnp.ndarray] = None,
        lags: Optional[jnp.ndarray] = None,
        initial_state: Optional[jnp.ndarray] = None,
        **overrides,
    ) -> System:
        """Build a delayed network of ``n_nodes`` neurons.

        Anything not given explicitly is sampled: ``Kij = U + U.T`` with
        ``U ~ 0.5 * U(0, 1)``, ``Ie``, ``lags`` and the initial rates from
        U(0, 1). ``a`` defaults to ``1 / n_nodes``.

        Args:
            n_nodes: Number of neurons
            key: JAX random key for sampled values (if None, seed 0)
            Kij: Coupling matrix [n, n]
            Ie: Injection currents [n]
            lags: Per-connection delays [n, n]
            initial_state: Initial firing rates [n], also used as the
                constant history before t0
            **overrides: Scalar parameter overrides (``a``, ``tau``)

        Returns:
            System ready for :func:`bdmodels.solve`
        """
        if n_nodes < 1:
            raise ValueError(f"n_nodes must be at least 1, got {n_nodes}")
        if key is None:
            key = jax.random.key(0)
        key_k, key_i, key_l, key_v = jax.random.split(key, 4)

        dynamics = cls(**overrides)
        params = dynamics.params.copy()
        if "a" not in overrides:
            params.a = 1.0 / n_nodes

        if Kij is None:
            Kij = 0.5 * jax.random.uniform(key_k, (n_nodes, n_nodes))
            Kij = Kij + Kij.T
        params.Kij = jnp.asarray(Kij)
        params.Ie = (
            jax.random.uniform(key_i, (n_nodes,)) if Ie is None else jnp.asarray(Ie)
        )
        if lags is None:
            lags = jax.random.uniform(key_l, (n_nodes, n_nodes))
        if initial_state is None:
            initial_state = jax.random.uniform(key_v, (n_nodes,))

        return System(
            dynamics,
            params,
            initial_state,
            lags=lags,
            tspan=cls.TSPAN,
            solvers=cls.default_solvers(),
            display=cls.display(n_nodes),
        )

    @staticmethod
    def default_solvers():
        return (Heun(),)

    @staticmethod
    def display(n_nodes: int) -> DisplayConfig:
        return DisplayConfig(
            latex=(
                r"\textbf{NeuralNetDDE} \medskip",
                r"An extreme time-delayed firing-rate neural network \smallskip",
                r"\qquad $\tau \dot V_i(t) = -V_i(t) + F\big(a \sum_j K_{ij} \, V_j(t-D_{ij}) + I_i \big)$ \smallskip",
                r"where each network connection has a unique time delay, \smallskip",
                r"\qquad $V_i(t)$ is the firing rate of the $i^{th}$ neuron, \smallskip",
                r"\qquad $K$ is the network connectivity matrix ($n$ x $n$), \smallskip",
                r"\qquad $a$ is a scaling parameter, \smallskip",
                r"\qquad $D$ is a matrix of delay constants ($n$ x $n$), \smallskip",
                r"\qquad $I$ is a vector of injection currents ($n$ x $1$), \smallskip",
                r"\qquad $F(v)=1/(1+\exp(-v))$ is a sigmoid function, \smallskip",
                r"\qquad $\tau$ is the time constant of the dynamics, \smallskip",
                r"\qquad $i{=}1 \dots n$. \medskip",
                "Notes",
                rf"\qquad 1. This simulation has $n{{=}}{n_nodes}$ neurons.",
                r"\qquad 2. It is only practical for small networks ($n{<}6$)",
            )
        )
