"""Lag declaration and lag-history decoding for per-connection delays.

A network of n neurons with one delay per connection declares n^2 lags to
the solver. The solver answers with a history block ``Z`` of shape
``[n, n^2]`` whose column ``c`` is the whole potential vector evaluated at
``t - flat_lags[c]``. The lags are declared as the column-major flattening
of the ``[n, n]`` lag matrix, which makes ``Z`` a sequence of n blocks of
shape ``[n, n]`` (block ``zi`` covers lag column ``zi`` of the matrix). The
value a connection needs sits on the diagonal of its block.
"""

from typing import Callable

import jax.numpy as jnp


def flatten_lags(lags: jnp.ndarray) -> jnp.ndarray:
    """Declare an ``[n, n]`` lag matrix as n^2 solver lags.

    Column-major order: lag ``c = i + j * n`` is ``lags[i, j]``.

    Args:
        lags: Lag matrix [n, n]

    Returns:
        Flat lags [n^2]
    """
    lags = jnp.asarray(lags)
    if lags.ndim != 2 or lags.shape[0] != lags.shape[1]:
        raise ValueError(f"Lag matrix must be square 2D, got shape {lags.shape}")
    return lags.T.reshape(-1)


def extract_lagged_values(Z: jnp.ndarray) -> jnp.ndarray:
    """Extract per-connection lagged values from a lag-grouped history block.

    ``Z`` is read as n consecutive ``[n, n]`` blocks; column ``zi`` of the
    result is the diagonal of block ``zi``::

        Vij[i, zi] = Z[i, zi * n + i]

    Args:
        Z: History block [n, n^2] as returned for the lags of
            :func:`flatten_lags`

    Returns:
        Vij: Lagged values [n, n]

    Raises:
        ValueError: If ``Z`` is not 2D with exactly n^2 columns.

    Example:
        >>> Z = jnp.arange(8.0).reshape(2, 4)
        >>> extract_lagged_values(Z)
        Array([[0., 2.],
               [5., 7.]], dtype=float32)
    """
    Z = jnp.asarray(Z)
    if Z.ndim != 2:
        raise ValueError(f"History block must be 2D [n, n^2], got shape {Z.shape}")
    n = Z.shape[0]
    if Z.shape[1] != n * n:
        raise ValueError(
            f"History block for {n} neurons needs {n * n} lag columns, got {Z.shape[1]}"
        )
    # blocks[p, zi, q] = Z[p, zi * n + q]
    blocks = Z.reshape(n, n, n)
    return jnp.diagonal(blocks, axis1=0, axis2=2).T


def evaluate_lags(
    history_fn: Callable[[jnp.ndarray], jnp.ndarray],
    t: float,
    flat_lags: jnp.ndarray,
) -> jnp.ndarray:
    """Build a history block by querying a history function at every lag.

    Args:
        history_fn: ``history_fn(times[m]) -> values[n, m]``
        t: Current time
        flat_lags: Lags as declared by :func:`flatten_lags` [n^2]

    Returns:
        Z: History block [n, n^2], ``Z[:, c] = V(t - flat_lags[c])``
    """
    return history_fn(t - flat_lags)


def lookup_history(
    buffer: jnp.ndarray,
    k: int,
    t0: float,
    dt: float,
    query_times: jnp.ndarray,
) -> jnp.ndarray:
    """Read a fixed-step trajectory buffer at arbitrary past times.

    Values between grid points are linearly interpolated. Queries before
    ``t0`` return ``buffer[0]`` (constant pre-history). Queries later than
    the newest filled row ``k`` return ``buffer[k]``; rows beyond ``k`` are
    never read. JIT-compatible, ``k`` may be traced.

    Args:
        buffer: Trajectory on the grid ``t0 + i * dt`` [n_rows, n]
        k: Index of the newest filled row
        t0: Time of ``buffer[0]``
        dt: Grid spacing
        query_times: Times to evaluate [m]

    Returns:
        Values [n, m]
    """
    pos = jnp.clip((query_times - t0) / dt, 0.0, k)
    i0 = jnp.floor(pos).astype(jnp.int32)
    i1 = jnp.minimum(i0 + 1, k)
    frac = (pos - i0)[:, None]
    values = buffer[i0] * (1.0 - frac) + buffer[i1] * frac  # [m, n]
    return values.T
