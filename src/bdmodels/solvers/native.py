"""Native fixed-step solvers."""

from typing import Callable

import jax.numpy as jnp

from ..core.bunch import Bunch
from .base import NativeSolver


class Euler(NativeSolver):
    """Forward Euler method."""

    def step(
        self,
        dynamics_fn: Callable,
        t: float,
        state: jnp.ndarray,
        dt: float,
        params: Bunch,
    ) -> jnp.ndarray:
        """Euler integration step: y_{n+1} = y_n + dt * f(t, y_n)."""
        return state + dt * dynamics_fn(t, state, params)


class Heun(NativeSolver):
    """Heun's method (improved Euler).

    Two-stage predictor-corrector, second order.
    """

    def step(
        self,
        dynamics_fn: Callable,
        t: float,
        state: jnp.ndarray,
        dt: float,
        params: Bunch,
    ) -> jnp.ndarray:
        """Heun integration step with predictor-corrector.

        Args:
            dynamics_fn: Vector field (t, state, params) -> derivatives
            t: Current time
            state: Current state [n_nodes]
            dt: Time step
            params: Parameters

        Returns:
            next_state: Next state [n_nodes]
        """
        k1 = dynamics_fn(t, state, params)

        # Predictor step
        y_pred = state + dt * k1

        k2 = dynamics_fn(t + dt, y_pred, params)

        # Corrector: average drift
        return state + dt * 0.5 * (k1 + k2)


class RungeKutta4(NativeSolver):
    """Classical 4th order Runge-Kutta method (RK4)."""

    def step(
        self,
        dynamics_fn: Callable,
        t: float,
        state: jnp.ndarray,
        dt: float,
        params: Bunch,
    ) -> jnp.ndarray:
        """RK4 integration step with four evaluations.

        Args:
            dynamics_fn: Vector field (t, state, params) -> derivatives
            t: Current time
            state: Current state [n_nodes]
            dt: Time step
            params: Parameters

        Returns:
            next_state: Next state [n_nodes]
        """
        k1 = dynamics_fn(t, state, params)
        k2 = dynamics_fn(t + 0.5 * dt, state + 0.5 * dt * k1, params)
        k3 = dynamics_fn(t + 0.5 * dt, state + 0.5 * dt * k2, params)
        k4 = dynamics_fn(t + dt, state + dt * k3, params)

        # y_{n+1} = y_n + dt/6 * (k1 + 2*k2 + 2*k3 + k4)
        return state + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
