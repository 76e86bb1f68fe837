"""Display metadata handed through to a host GUI."""

from typing import Optional, Sequence, Tuple

DEFAULT_PANELS = ("Time Portrait", "Phase Portrait", "Space-Time", "Solver")


class DisplayConfig:
    """Equation text and panel titles for a host application.

    Nothing in bdmodels reads these values; they travel with a
    :class:`~bdmodels.core.system.System` so a front end can label its
    panels.

    Args:
        title: Heading of the equations panel
        latex: Lines of LaTeX shown in the equations panel
        panels: Titles of the plotting / solver panels to open
    """

    def __init__(
        self,
        title: str = "Equations",
        latex: Sequence[str] = (),
        panels: Optional[Sequence[str]] = None,
    ):
        self.title = title
        self.latex: Tuple[str, ...] = tuple(latex)
        self.panels: Tuple[str, ...] = (
            DEFAULT_PANELS if panels is None else tuple(panels)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DisplayConfig):
            return NotImplemented
        return (self.title, self.latex, self.panels) == (
            other.title,
            other.latex,
            other.panels,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(title={self.title!r}, "
            f"lines={len(self.latex)}, panels={list(self.panels)})"
        )
