"""Folium trip map renderer adapter.

Places resolved trip stops on an interactive HTML map. The destination
is drawn first, itinerary stops are numbered, and every point that came
from the fallback table is drawn in grey with an "approximate" note so a
wrong placement is never shown as if it were precise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ...domain.errors import RenderingError
from ...domain.models import StopResolution


def zoom_for(marker_count: int) -> int:
    """Zoom level by marker count: tight for one point, wider for many."""
    if marker_count <= 1:
        return 14
    if marker_count <= 3:
        return 12
    if marker_count <= 5:
        return 11
    return 10


@dataclass
class FoliumMapRenderer:
    """Folium-based interactive map renderer.

    This adapter implements MapRendererPort using Folium for
    generating interactive HTML maps.
    """

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def render(
        self,
        stops: Sequence[StopResolution],
        output_path: Path,
    ) -> Path:
        """Render resolved stops on a map and save to file.

        Args:
            stops: Stops to draw; unresolved entries are skipped.
            output_path: Where to save the rendered map.

        Returns:
            Path to the generated map file.

        Raises:
            RenderingError: If nothing is resolved or rendering fails.
        """
        placed = [s for s in stops if s.location is not None]
        if not placed:
            raise RenderingError(
                "No resolved locations to render",
                output_path=str(output_path),
                renderer_type="folium",
            )

        self._logger.info(
            "Rendering trip map",
            extra={
                "stops": len(placed),
                "approximate": sum(1 for s in placed if s.location.approximate),  # type: ignore[union-attr]
                "output_path": str(output_path),
            },
        )

        try:
            import folium

            lats = [s.location.latitude for s in placed]  # type: ignore[union-attr]
            lons = [s.location.longitude for s in placed]  # type: ignore[union-attr]
            center = [sum(lats) / len(lats), sum(lons) / len(lons)]

            m = folium.Map(location=center, zoom_start=zoom_for(len(placed)))

            for index, stop in enumerate(placed):
                location = stop.location
                assert location is not None
                if location.approximate:
                    color = "lightgray"
                    popup = f"{stop.label}: {stop.address} (approximate: {location.city} centre)"
                else:
                    color = "green" if index == 0 else "blue"
                    popup = f"{stop.label}: {location.normalized_address}"
                folium.Marker(
                    location=[location.latitude, location.longitude],
                    popup=popup,
                    tooltip=stop.label,
                    icon=folium.Icon(color=color),
                ).add_to(m)

            if len(placed) >= 2:
                folium.PolyLine(
                    [[lat, lon] for lat, lon in zip(lats, lons)],
                    weight=3,
                    color="blue",
                    opacity=0.6,
                ).add_to(m)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            m.save(str(output_path))

            self._logger.info(
                "Map rendered successfully",
                extra={"output_path": str(output_path)},
            )

            return output_path

        except ImportError as e:
            raise RenderingError(
                "Folium not installed",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )
        except Exception as e:
            self._logger.error(
                "Map rendering failed",
                extra={"error": str(e), "output_path": str(output_path)},
            )
            raise RenderingError(
                f"Map rendering failed: {e}",
                output_path=str(output_path),
                renderer_type="folium",
                cause=e,
            )
