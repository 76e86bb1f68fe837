"""Abstract base class for neural network vector fields.

A dynamics class declares its parameters and implements the pure
right-hand side ``dynamics(t, V, params)`` (ODE) or
``dynamics(t, V, Z, params)`` (DDE, ``Z`` being the solver's lag-history
block). Constructors of concrete models return a
:class:`~bdmodels.core.system.System` that pairs the dynamics with sampled
or user supplied parameters.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple

import jax.numpy as jnp

from ..core.bunch import Bunch


def check_vector(name: str, x: jnp.ndarray, n: int) -> None:
    """Raise ``ValueError`` unless ``x`` has shape ``[n]``."""
    shape = jnp.shape(x)
    if shape != (n,):
        raise ValueError(f"{name} must have shape {(n,)}, got {shape}")


def check_matrix(name: str, x: jnp.ndarray, n: int) -> None:
    """Raise ``ValueError`` unless ``x`` has shape ``[n, n]``."""
    shape = jnp.shape(x)
    if shape != (n, n):
        raise ValueError(f"{name} must have shape {(n, n)}, got {shape}")


class AbstractDynamics(ABC):
    """Abstract base class for network vector fields.

    Attributes
    ----------
    STATE_NAMES : tuple of str
        Names of integrated state variables (one value per neuron each)
    DEFAULT_PARAMS : Bunch
        Default values of the scalar parameters
    NODE_PARAMS : dict
        Parameters sized by the number of neurons ``{name: ndim}``, where
        ``ndim`` is 1 for ``[n]`` vectors and 2 for ``[n, n]`` matrices
    DELAYED : bool
        Whether ``dynamics`` takes a lag-history block
    """

    STATE_NAMES: Tuple[str, ...] = ("V",)

    DEFAULT_PARAMS: Bunch = Bunch()

    NODE_PARAMS: Dict[str, int] = {}

    DELAYED: bool = False

    def __init__(self, **kwargs):
        """Initialize dynamics with optional parameter overrides.

        Parameters
        ----------
        **kwargs : dict
            Overrides for DEFAULT_PARAMS, or values for NODE_PARAMS
        """
        self.params = self.DEFAULT_PARAMS.copy()
        for key, value in kwargs.items():
            if key not in self.DEFAULT_PARAMS and key not in self.NODE_PARAMS:
                raise ValueError(
                    f"Unknown parameter '{key}' for {self.__class__.__name__}. "
                    f"Available parameters: {self.parameter_names}"
                )
            self.params[key] = value

    def __init_subclass__(cls, **kwargs):
        """Merge parameter declarations with the parent class."""
        super().__init_subclass__(**kwargs)

        parent = cls.__bases__[0]
        if issubclass(parent, AbstractDynamics) and parent is not AbstractDynamics:
            merged_params = parent.DEFAULT_PARAMS.copy()
            merged_params.update(cls.DEFAULT_PARAMS)
            cls.DEFAULT_PARAMS = merged_params

            merged_node_params = dict(parent.NODE_PARAMS)
            merged_node_params.update(cls.NODE_PARAMS)
            cls.NODE_PARAMS = merged_node_params

        for name, ndim in cls.NODE_PARAMS.items():
            if ndim not in (1, 2):
                raise ValueError(
                    f"{cls.__name__}: NODE_PARAMS['{name}'] must be 1 or 2, got {ndim}"
                )

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        """Scalar and node-sized parameter names."""
        return tuple(self.DEFAULT_PARAMS.keys()) + tuple(self.NODE_PARAMS.keys())

    @property
    def N_STATES(self) -> int:
        return len(self.STATE_NAMES)

    def check_params(self, params: Bunch, n_nodes: int) -> None:
        """Validate a parameter set against a network size.

        Args:
            params: Parameters to be passed to ``dynamics``
            n_nodes: Number of neurons

        Raises:
            ValueError: If a parameter is missing or has the wrong shape
        """
        missing = [name for name in self.parameter_names if name not in params]
        if missing:
            raise ValueError(
                f"Missing parameters for {self.__class__.__name__}: {missing}"
            )
        for name, ndim in self.NODE_PARAMS.items():
            if ndim == 1:
                check_vector(name, params[name], n_nodes)
            else:
                check_matrix(name, params[name], n_nodes)

    @abstractmethod
    def dynamics(self, t: float, state: jnp.ndarray, *args) -> jnp.ndarray:
        """Compute the state derivative.

        ODE models take ``(t, state, params)``; delay models take
        ``(t, state, Z, params)``.

        Returns
        -------
        derivatives : jnp.ndarray
            New array with the shape of ``state``
        """
        pass

    def verify(self, n_nodes: int = 1, verbose: bool = True) -> bool:
        """Verify that the dynamics implementation is correct.

        Calls the vector field once at t=0 with a zero state, zero
        node-sized parameters and (for delay models) a zero history block,
        and checks the shape of the result.

        Args:
            n_nodes: Number of neurons to test with
            verbose: Whether to print verification details

        Returns:
            True if verification passes, False otherwise
        """
        try:
            state = jnp.zeros((n_nodes,))
            params = self.params.copy()
            for name, ndim in self.NODE_PARAMS.items():
                shape = (n_nodes,) if ndim == 1 else (n_nodes, n_nodes)
                params[name] = jnp.zeros(shape)

            if verbose:
                print(f"Verifying {self.__class__.__name__}:")
                print(f"  State shape: {state.shape}")
                print(f"  Parameters: {list(params.keys())}")

            if self.DELAYED:
                Z = jnp.zeros((n_nodes, n_nodes * n_nodes))
                if verbose:
                    print(f"  History block shape: {Z.shape}")
                result = self.dynamics(0.0, state, Z, params)
            else:
                result = self.dynamics(0.0, state, params)

            if jnp.shape(result) != (n_nodes,):
                if verbose:
                    print(
                        f"  ERROR: Expected derivatives shape {(n_nodes,)}, got {jnp.shape(result)}"
                    )
                return False

            if verbose:
                print("  Verification passed!")
            return True

        except Exception as e:
            if verbose:
                print(f"  ERROR: {e}")
            return False

    def __repr__(self) -> str:
        kind = "DDE" if self.DELAYED else "ODE"
        return (
            f"{self.__class__.__name__}("
            f"kind={kind}, "
            f"params={list(self.DEFAULT_PARAMS.keys())}, "
            f"node_params={list(self.NODE_PARAMS.keys())})"
        )
