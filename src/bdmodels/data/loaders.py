"""Loading connectivity matrices from user-chosen files."""

from pathlib import Path
from typing import Optional, Union

import jax.numpy as jnp
import numpy as np

MATRIX_KEYS = ("Wij", "Kij", "weights")


def load_matrix(path: Optional[Union[str, Path]]) -> Optional[jnp.ndarray]:
    """
    Load a numeric matrix from a file.

    Supported formats:
        - ``.npy``: a single array
        - ``.npz``: the array stored under ``Wij``, ``Kij`` or ``weights``,
          otherwise the first array in the archive
        - anything else: text, whitespace or comma separated, with ``#``
          comment lines

    Args:
        path: File to read. ``None`` or an empty string means the user
            cancelled the file selection.

    Returns:
        matrix: 2D array, or None if nothing was selected or the file holds
        an empty matrix

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the data is not a 2D matrix

    Examples:
        >>> from bdmodels.data import load_matrix
        >>> Wij = load_matrix("weights.csv")
        >>> system = HopfieldNet.system(Wij)
    """
    if path is None or str(path) == "":
        return None

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Matrix file '{path}' not found")

    suffix = path.suffix.lower()
    if suffix == ".npy":
        data = np.load(path)
    elif suffix == ".npz":
        with np.load(path) as archive:
            names = list(archive.files)
            if not names:
                return None
            key = next((k for k in MATRIX_KEYS if k in names), names[0])
            data = archive[key]
    else:
        rows = [
            line
            for line in path.read_text().splitlines()
            if line.strip() and not line.lstrip().startswith("#")
        ]
        if not rows:
            return None
        delimiter = "," if any("," in row for row in rows) else None
        data = np.loadtxt(path, delimiter=delimiter, ndmin=2)

    data = np.asarray(data, dtype=float)
    if data.size == 0:
        return None
    if data.ndim != 2:
        raise ValueError(f"Expected a 2D matrix in '{path}', got {data.ndim}D data")

    return jnp.array(data)
