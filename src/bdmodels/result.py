"""Result types for bdmodels native solvers.

Diffrax-like solution objects so native and Diffrax solves can be consumed
the same way.
"""

import jax.numpy as jnp
from jax import tree_util


@tree_util.register_pytree_node_class
class NativeSolution:
    """Solution object for native solvers.

    Provides the same interface as Diffrax solutions (.ys, .ts) while being
    a proper JAX PyTree for compatibility with JAX transformations.

    Attributes:
        ts: Time points, shape [n_time]
        ys: Trajectory data, shape [n_time, n_nodes]
        dt: Time step (optional), stored as static auxiliary data
    """

    def __init__(self, ts: jnp.ndarray, ys: jnp.ndarray, dt: float = None):
        self.ts = ts
        self.ys = ys
        self.dt = dt

    @property
    def time(self):
        return self.ts

    @property
    def data(self):
        return self.ys

    def tree_flatten(self):
        """JAX PyTree flatten for transformations."""
        children = (self.ts, self.ys)
        aux_data = (self.dt,)
        return children, aux_data

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        """JAX PyTree unflatten for transformations."""
        ts, ys = children
        (dt,) = aux_data
        return cls(ts, ys, dt=dt)

    def __repr__(self):
        return f"NativeSolution(shape={self.ys.shape}, t=[{self.ts[0]:.2f}, {self.ts[-1]:.2f}])"


def wrap_native_result(
    trajectory: jnp.ndarray, ts: jnp.ndarray, dt: float
) -> NativeSolution:
    """Wrap a scanned trajectory in a solution object.

    Row k of the trajectory is the state at ``ts[k]``, the end of step k.

    Args:
        trajectory: Trajectory array from native solver, shape [n_time, n_nodes]
        ts: Step end times, shape [n_time]
        dt: Nominal time step (the last step may be shorter)

    Returns:
        NativeSolution with .ys and .ts attributes like Diffrax
    """
    return NativeSolution(ts=ts, ys=trajectory, dt=dt)
