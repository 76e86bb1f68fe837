"""Continuous Hopfield network.

References:
    - Hopfield (1984). Neurons with graded response have collective
      computational properties like those of two-state neurons. PNAS, 81,
      3088-3092.
"""

from typing import Callable, Optional

import diffrax
import jax
import jax.numpy as jnp

from ..core.bunch import Bunch
from ..core.display import DisplayConfig
from ..core.system import System
from ..solvers import DiffraxSolver, Euler
from .base import AbstractDynamics, check_matrix, check_vector


def hopfield_vector_field(
    t: float,
    V: jnp.ndarray,
    Wij: jnp.ndarray,
    Iapp: jnp.ndarray,
    b: float,
    tau: float,
) -> jnp.ndarray:
    """Right-hand side of the continuous Hopfield network.

    ``dV = (-V + Wij @ tanh(b * V) + Iapp) / tau``

    Args:
        t: Current time (unused, the system is autonomous)
        V: Neuron potentials [n]
        Wij: Connection weights, row i receives from column j [n, n]
        Iapp: Applied currents [n]
        b: Slope of the tanh transfer function
        tau: Time constant

    Returns:
        dV: Derivatives [n]

    Raises:
        ValueError: If V, Wij and Iapp disagree on n
    """
    del t
    V, Wij, Iapp = jnp.asarray(V), jnp.asarray(Wij), jnp.asarray(Iapp)
    if V.ndim != 1:
        raise ValueError(f"V must be 1D [n], got shape {V.shape}")
    n = V.shape[0]
    check_matrix("Wij", Wij, n)
    check_vector("Iapp", Iapp, n)
    return (-V + Wij @ jnp.tanh(b * V) + Iapp) / tau


class HopfieldNet(AbstractDynamics):
    """Continuous Hopfield network with n nodes.

    Notes
    -----
    **State equation:**

    $$
    \\tau \\dot V_i = -V_i + \\sum_j W_{ij} \\tanh(b V_j) + I_i
    $$

    Wij is typically symmetric with a zero diagonal, but neither property is
    required.

    Attributes
    ----------
    DEFAULT_PARAMS : Bunch
        ``b=1.0`` (slope), ``tau=10.0`` (time constant)
    NODE_PARAMS : dict
        ``Wij`` [n, n] and ``Iapp`` [n]

    Examples
    --------
    >>> Wij = HopfieldNet.random_weights(20, key=jax.random.key(1))
    >>> system = HopfieldNet.system(Wij)
    >>> result = solve(system)
    """

    DEFAULT_PARAMS = Bunch(
        b=1.0,  # Slope of tanh
        tau=10.0,  # Time constant
    )

    NODE_PARAMS = {
        "Wij": 2,
        "Iapp": 1,
    }

    TSPAN = (0.0, 200.0)

    def dynamics(self, t: float, state: jnp.ndarray, params: Bunch) -> jnp.ndarray:
        """Compute Hopfield derivatives.

        Parameters
        ----------
        t : float
            Current time (unused)
        state : jnp.ndarray
            Potentials with shape ``[n]``
        params : Bunch
            ``Wij``, ``Iapp``, ``b``, ``tau``

        Returns
        -------
        derivatives : jnp.ndarray
            Shape ``[n]``
        """
        return hopfield_vector_field(
            t, state, params.Wij, params.Iapp, params.b, params.tau
        )

    @staticmethod
    def random_weights(
        n_nodes: int, key: Optional[jax.random.PRNGKey] = None
    ) -> jnp.ndarray:
        """Symmetric random weights with a zero diagonal.

        Args:
            n_nodes: Number of neurons
            key: JAX random key (if None, creates one with seed 0)

        Returns:
            Wij [n_nodes, n_nodes]
        """
        if key is None:
            key = jax.random.key(0)
        Wij = 0.5 * jax.random.uniform(key, (n_nodes, n_nodes))
        Wij = Wij + Wij.T
        return Wij * (1.0 - jnp.eye(n_nodes))

    @classmethod
    def system(
        cls,
        Wij: jnp.ndarray,
        key: Optional[jax.random.PRNGKey] = None,
        Iapp: Optional[jnp.ndarray] = None,
        initial_state: Optional[jnp.ndarray] = None,
        **overrides,
    ) -> System:
        """Build a Hopfield system around a weight matrix.

        The number of neurons is taken from ``Wij``. Applied currents and
        initial potentials not given explicitly are drawn from U(0, 1).

        Args:
            Wij: Connection weights [n, n]
            key: JAX random key for sampled values (if None, seed 0)
            Iapp: Applied currents [n]
            initial_state: Initial potentials [n]
            **overrides: Scalar parameter overrides (``b``, ``tau``)

        Returns:
            System ready for :func:`bdmodels.solve`
        """
        Wij = jnp.asarray(Wij)
        if Wij.ndim != 2 or Wij.shape[0] != Wij.shape[1]:
            raise ValueError(f"Weight matrix must be square 2D, got shape {Wij.shape}")
        n = Wij.shape[0]

        if key is None:
            key = jax.random.key(0)
        key_i, key_v = jax.random.split(key)

        dynamics = cls(**overrides)
        params = dynamics.params.copy()
        params.Wij = Wij
        params.Iapp = (
            jax.random.uniform(key_i, (n,)) if Iapp is None else jnp.asarray(Iapp)
        )
        if initial_state is None:
            initial_state = jax.random.uniform(key_v, (n,))

        return System(
            dynamics,
            params,
            initial_state,
            tspan=cls.TSPAN,
            solvers=cls.default_solvers(),
            display=cls.display(n),
        )

    @classmethod
    def from_file(
        cls,
        path,
        loader: Optional[Callable] = None,
        key: Optional[jax.random.PRNGKey] = None,
    ) -> Optional[System]:
        """Build a system from a weight matrix stored in a file.

        Args:
            path: File reference handed to ``loader``; ``None`` or an empty
                string means the user cancelled the selection
            loader: ``loader(path) -> matrix or None``
                (default: :func:`bdmodels.data.load_matrix`)
            key: JAX random key for sampled values

        Returns:
            System, or None when no matrix was loaded
        """
        if loader is None:
            from ..data.loaders import load_matrix

            loader = load_matrix

        Wij = loader(path)
        if Wij is None or jnp.size(Wij) == 0:
            return None
        return cls.system(Wij, key=key)

    @staticmethod
    def default_solvers():
        controller = diffrax.PIDController(rtol=1e-6, atol=1e-6)
        return (
            DiffraxSolver(diffrax.Dopri5(), stepsize_controller=controller, max_steps=16384),
            DiffraxSolver(diffrax.Tsit5(), stepsize_controller=controller, max_steps=16384),
            Euler(),
        )

    @staticmethod
    def display(n_nodes: int) -> DisplayConfig:
        return DisplayConfig(
            latex=(
                r"\textbf{HopfieldNet}",
                "",
                "The Continuous Hopfield Network",
                r"\qquad $\tau \dot V_i = -V_i + \sum_j W_{ij} \tanh(b\, V_j) + I_{app}$",
                "where",
                r"\qquad $V$ is the firing rate of each neuron ($n$ x $1$),",
                r"\qquad $W$ is the connectivity matrix ($n$ x $n$),",
                r"\qquad $b$ is a slope parameter,",
                r"\qquad $I_{app}$ is the applied current ($n$ x $1$),",
                r"\qquad $i{=}1 \dots n$.",
                "",
                "Notes",
                rf"\qquad 1. This simulation has $n{{=}}{n_nodes}$.",
            )
        )
