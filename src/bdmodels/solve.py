"""Prepare-solve pattern for model systems.

``prepare()`` turns a :class:`~bdmodels.core.system.System` and a solver into
a pure function of a configuration PyTree, so the simulation can be jitted,
vmapped over parameters or differentiated. ``solve()`` prepares and runs in
one call.
"""

import math
import warnings
from typing import Callable, Optional, Tuple

import diffrax
import jax
import jax.numpy as jnp
from plum import dispatch

from .core.bunch import Bunch
from .core.system import System
from .result import wrap_native_result
from .solvers.base import AbstractSolver, NativeSolver
from .solvers.diffrax import DiffraxSolver
from .utils.history import evaluate_lags, flatten_lags, lookup_history


def solve(
    system: System,
    solver: Optional[AbstractSolver] = None,
    t0: Optional[float] = None,
    t1: Optional[float] = None,
    dt: float = 0.1,
):
    """Main entry point for simulation.

    Args:
        system: System description (e.g. from ``HopfieldNet.system``)
        solver: Solver instance (default: the system's first solver)
        t0: Start time (default: ``system.tspan[0]``)
        t1: End time (default: ``system.tspan[1]``)
        dt: Time step (initial step size for adaptive Diffrax solvers)

    Returns:
        NativeSolution for native solvers, diffrax.Solution otherwise

    Example:
        >>> from bdmodels import HopfieldNet, solve
        >>> system = HopfieldNet.system(HopfieldNet.random_weights(20))
        >>> result = solve(system, t1=50.0)
    """
    if solver is None:
        if not system.solvers:
            raise ValueError(f"{system!r} declares no solvers; pass one explicitly")
        solver = system.solvers[0]
    solve_fn, config = prepare(system, solver, t0=t0, t1=t1, dt=dt)
    return solve_fn(config)


def _time_grid(
    system: System, t0: Optional[float], t1: Optional[float], dt: float
) -> Tuple[float, float, jnp.ndarray, jnp.ndarray]:
    """Resolve the integration interval and the fixed-step grid.

    Returns:
        t0, t1: Integration interval
        time_steps: Step start times ``t0 + k * dt``
        step_sizes: Step lengths, ``dt`` except for a shorter last step
            that ends exactly at ``t1``
    """
    t0 = system.tspan[0] if t0 is None else float(t0)
    t1 = system.tspan[1] if t1 is None else float(t1)
    if dt <= 0.0:
        raise ValueError(f"dt must be positive, got {dt}")
    if t1 <= t0:
        raise ValueError(f"t1 ({t1}) must be greater than t0 ({t0})")
    n_steps = max(int(math.ceil((t1 - t0) / dt - 1e-9)), 1)
    time_steps = t0 + dt * jnp.arange(n_steps)
    step_sizes = jnp.minimum(dt, t1 - time_steps)
    return t0, t1, time_steps, step_sizes


def _save_times(
    time_steps: jnp.ndarray, step_sizes: jnp.ndarray, t1: float
) -> jnp.ndarray:
    """Step end times, never past ``t1``."""
    return jnp.minimum(time_steps + step_sizes, t1)


def _build_config(system: System, t0: float, t1: float, dt: float) -> Bunch:
    config = Bunch(
        params=system.params.copy(),
        initial_state=system.initial_state,
        _internal=Bunch(time=Bunch(t0=t0, t1=t1, dt=dt)),
    )
    if system.is_delayed:
        config.lags = system.lags
    return config


@dispatch
def prepare(
    system: System,
    solver: NativeSolver,
    t0: Optional[float] = None,
    t1: Optional[float] = None,
    dt: float = 0.1,
) -> Tuple[Callable, Bunch]:
    """Prepare a system for fixed-step integration.

    Parameters
    ----------
    system : System
        ODE or DDE system description
    solver : NativeSolver
        Euler, Heun or RungeKutta4
    t0, t1 : float, optional
        Integration interval, by default ``system.tspan``
    dt : float, optional
        Integration time step, by default 0.1

    Returns
    -------
    solve_function : Callable
        Pure function ``solve_function(config) -> NativeSolution``
    config : Bunch
        Configuration PyTree containing:

        - **params** : Model parameters
        - **initial_state** : Initial state [n_nodes]
        - **lags** : Lag matrix [n_nodes, n_nodes] (delay systems only)
        - **_internal** : Time grid settings

    Notes
    -----
    The grid is ``t0, t0 + dt, ...``; when ``t1 - t0`` is not a multiple of
    ``dt`` the last step is shortened to end exactly at ``t1``.

    Delay systems are integrated by the method of steps. The trajectory is
    written into a preallocated buffer, and every stage evaluation builds
    the lag-history block from that buffer by linear interpolation. Times
    before ``t0`` read the initial state. A lag shorter than ``dt`` reaches
    into the step being computed; such lookups return the state at the start
    of the step, and a ``UserWarning`` is issued. The check runs once, on
    ``system.lags`` at prepare time. Lags replaced later through
    ``config.lags`` are not checked again.
    """
    t0, t1, time_steps, step_sizes = _time_grid(system, t0, t1, dt)
    save_times = _save_times(time_steps, step_sizes, t1)
    config = _build_config(system, t0, t1, dt)

    dynamics_fn = system.vector_field
    solver_step = solver.step

    if not system.is_delayed:

        def _f(config):
            """Pure integration function."""

            def op(state, inputs):
                t, h = inputs
                next_state = solver_step(dynamics_fn, t, state, h, config.params)
                return next_state, next_state

            _, res = jax.lax.scan(op, config.initial_state, (time_steps, step_sizes))
            return wrap_native_result(res, save_times, dt)

        return _f, config

    min_lag = float(jnp.min(system.lags))
    if min_lag < dt:
        warnings.warn(
            f"Smallest lag ({min_lag:.4g}) is below dt ({dt}). Lookups inside the "
            "current step use the state at the start of the step; reduce dt for "
            "accuracy.",
            UserWarning,
        )

    n_steps = time_steps.shape[0]
    step_indices = jnp.arange(n_steps)

    def _f(config):
        """Pure integration function with a lag-history buffer."""
        state0 = config.initial_state
        flat_lags = flatten_lags(config.lags)

        # Row k holds the state at t0 + k * dt; only the final row may be
        # off the grid and it is never read back
        buffer0 = jnp.zeros((n_steps + 1,) + state0.shape, dtype=state0.dtype)
        buffer0 = buffer0.at[0].set(state0)

        def op(carry, inputs):
            buffer, state = carry
            t, h, k = inputs

            def history_fn(times):
                return lookup_history(buffer, k, t0, dt, times)

            def wrapped_dynamics(t_inner, y, params):
                Z = evaluate_lags(history_fn, t_inner, flat_lags)
                return dynamics_fn(t_inner, y, Z, params)

            next_state = solver_step(wrapped_dynamics, t, state, h, config.params)
            buffer = buffer.at[k + 1].set(next_state)
            return (buffer, next_state), next_state

        _, res = jax.lax.scan(
            op, (buffer0, state0), (time_steps, step_sizes, step_indices)
        )
        return wrap_native_result(res, save_times, dt)

    return _f, config


@dispatch
def prepare(  # noqa: F811
    system: System,
    solver: DiffraxSolver,
    t0: Optional[float] = None,
    t1: Optional[float] = None,
    dt: float = 0.1,
) -> Tuple[Callable, Bunch]:
    """Prepare an ODE system for a Diffrax solve.

    Parameters
    ----------
    system : System
        ODE system description
    solver : DiffraxSolver
        Wrapped Diffrax solver (Dopri5, Tsit5, ...)
    t0, t1 : float, optional
        Integration interval, by default ``system.tspan``
    dt : float, optional
        Initial step size (dt0), by default 0.1

    Returns
    -------
    solve_function : Callable
        Pure function ``solve_function(config) -> diffrax.Solution``
    config : Bunch
        Configuration PyTree (``params``, ``initial_state``, ``_internal``)

    Raises
    ------
    ValueError
        If the system has lags. Diffrax's internal loop cannot maintain the
        history buffer; use a NativeSolver instead.
    """
    if system.is_delayed:
        raise ValueError(
            f"Diffrax solver does not support delay systems (max_lag={system.max_lag}). "
            "Delay models need the history buffer of a NativeSolver."
        )

    t0, t1, time_steps, step_sizes = _time_grid(system, t0, t1, dt)
    config = _build_config(system, t0, t1, dt)

    dynamics_fn = system.vector_field
    saveat = (
        solver.saveat
        if solver.saveat is not None
        else diffrax.SaveAt(ts=_save_times(time_steps, step_sizes, t1))
    )

    def vector_field(t, y, args):
        """Diffrax-compatible vector field: f(t, y, args) -> dy/dt."""
        return dynamics_fn(t, y, args)

    def _f(config):
        """Pure integration function using Diffrax."""
        return diffrax.diffeqsolve(
            diffrax.ODETerm(vector_field),
            solver.solver,
            t0=t0,
            t1=t1,
            dt0=dt,
            y0=config.initial_state,
            args=config.params,
            saveat=saveat,
            stepsize_controller=solver.stepsize_controller,
            max_steps=solver.max_steps,
            **solver.diffrax_kwargs,
        )

    return _f, config
