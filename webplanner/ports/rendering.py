"""Rendering port - Abstraction for map generation.

This protocol defines the contract for map rendering, allowing
different implementations (Folium, Plotly, etc.) to be used.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import StopResolution


class MapRendererPort(Protocol):
    """Port for map rendering.

    Implementation: adapters/rendering/folium_adapter.py

    Map renderers place resolved trip stops on an interactive map.
    """

    def render(
        self,
        stops: Sequence[StopResolution],
        output_path: Path,
    ) -> Path:
        """Render resolved stops on a map and save to file.

        Args:
            stops: Resolved stops, destination first.
            output_path: Where to save the rendered map.

        Returns:
            Path to the generated map file.
        """
        ...
