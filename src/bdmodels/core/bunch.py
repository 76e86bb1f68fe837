"""Parameter container with attribute access and JAX PyTree support."""

from typing import Any, Tuple

import jax


class Bunch(dict):
    """Dictionary with attribute access for model parameters.

    Both ``params['tau']`` and ``params.tau`` work. Registered as a JAX
    PyTree so parameter sets can be passed through ``jax.jit``, ``jax.vmap``
    and ``jax.grad`` unchanged.

    Examples:
        >>> params = Bunch(b=1.0, tau=10.0)
        >>> params.tau
        10.0
        >>> jax.tree.map(lambda x: x * 2, params)
        Bunch(b=2.0, tau=20.0)
    """

    def __getattr__(self, key: str) -> Any:
        try:
            return self[key]
        except KeyError:
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{key}'"
            )

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value

    def __delattr__(self, key: str) -> None:
        try:
            del self[key]
        except KeyError:
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{key}'"
            )

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self.items())
        return f"{self.__class__.__name__}({items})"

    def copy(self) -> "Bunch":
        """Create a shallow copy of the Bunch."""
        return Bunch(super().copy())


def _bunch_tree_flatten(bunch: Bunch) -> Tuple[Tuple[Any, ...], Tuple[str, ...]]:
    keys = tuple(sorted(bunch.keys()))  # Sort for deterministic order
    values = tuple(bunch[key] for key in keys)
    return values, keys


def _bunch_tree_unflatten(keys: Tuple[str, ...], values: Tuple[Any, ...]) -> Bunch:
    return Bunch(zip(keys, values))


jax.tree_util.register_pytree_node(Bunch, _bunch_tree_flatten, _bunch_tree_unflatten)
