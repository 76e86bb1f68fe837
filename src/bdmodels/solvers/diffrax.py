"""Diffrax-based adaptive solvers."""

from typing import Optional

import diffrax

from .base import AbstractSolver


class DiffraxSolver(AbstractSolver):
    """Wrapper for Diffrax solvers.

    Forwards the most commonly used diffeqsolve parameters explicitly and
    everything else via ``**kwargs``. Only ODE systems can be solved this
    way; delay models need the native history buffer.

    Important Notes:
        - With ``saveat=None`` the output is saved on the same grid the
          native solvers use, ``t0 + dt, t0 + 2 dt, ...``.
        - ``SaveAt(steps=True)`` pads ``ts``/``ys`` with inf beyond the steps
          actually taken; filter with ``jnp.isfinite(solution.ts)``.

    Example:
        >>> solver = DiffraxSolver(
        ...     diffrax.Dopri5(),
        ...     stepsize_controller=diffrax.PIDController(rtol=1e-6, atol=1e-6),
        ... )
    """

    def __init__(
        self,
        solver,
        saveat: Optional[diffrax.SaveAt] = None,
        stepsize_controller=None,
        max_steps: int = 4096,
        **kwargs,
    ):
        """Initialize with Diffrax solver instance and options.

        Args:
            solver: Diffrax solver instance (e.g., diffrax.Dopri5())
            saveat: SaveAt instance for output control (None = native grid)
            stepsize_controller: Step size controller for adaptive stepping
            max_steps: Maximum integration steps
            **kwargs: Additional arguments passed to diffeqsolve (e.g. adjoint,
                throw, progress_meter). See
                https://docs.kidger.site/diffrax/api/diffeqsolve/
        """
        self.solver = solver
        self.saveat = saveat
        self.stepsize_controller = (
            stepsize_controller
            if stepsize_controller is not None
            else diffrax.ConstantStepSize()
        )
        self.max_steps = max_steps

        self.diffrax_kwargs = kwargs

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"{self.solver.__class__.__name__}, "
            f"stepsize_controller={self.stepsize_controller.__class__.__name__})"
        )
