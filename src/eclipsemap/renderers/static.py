"""Matplotlib static PNG renderer."""

from collections.abc import Sequence
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from eclipsemap.models import Coord, EclipseEvent
from eclipsemap.projection import lat_to_tile_y, lng_to_tile_x

_ROOT = Path(__file__).parent.parent.parent.parent
_ZOOM = 6  # Any zoom works; the axes are rescaled to the data
_PAD = 0.5  # Tile units around the path


def _project(coords: Sequence[Coord]) -> tuple[np.ndarray, np.ndarray]:
    """(lng, lat) pairs to Web Mercator tile space, y flipped so north is up."""
    if not coords:
        return np.empty(0), np.empty(0)
    xs = np.array([lng_to_tile_x(lng, _ZOOM) for lng, _ in coords])
    ys = np.array([-lat_to_tile_y(lat, _ZOOM) for _, lat in coords])
    return xs, ys


def render_static_map(event: EclipseEvent, map_size: int = 10) -> Figure:
    """Render an eclipse path as a static matplotlib image.

    Args:
        event: The eclipse whose band, limits, and cities are drawn.
        map_size: Output image width in inches.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(map_size, map_size * 0.75))
    fig.patch.set_facecolor("#1a1a2e")
    ax.set_facecolor("#1a1a2e")

    nx, ny = _project(event.north_limit)
    sx, sy = _project(event.south_limit)
    if nx.size and sx.size:
        ax.fill(
            np.concatenate([nx, sx[::-1]]),
            np.concatenate([ny, sy[::-1]]),
            color="#ff6b35",
            alpha=0.25,
            linewidth=0,
            zorder=1,
        )
    for xs, ys in ((nx, ny), (sx, sy)):
        ax.plot(xs, ys, color="#60a5fa", linewidth=1.5, linestyle="--", zorder=2)

    cx, cy = _project(event.central_line)
    ax.plot(cx, cy, color="#ef4444", linewidth=6, alpha=0.4, zorder=3)
    ax.plot(cx, cy, color="#ef4444", linewidth=2, zorder=3)

    if event.cities:
        px, py = _project([(c.point.lng, c.point.lat) for c in event.cities])
        colors = ["#fbbf24" if c.in_totality else "#94a3b8" for c in event.cities]
        ax.scatter(px, py, s=40, c=colors, edgecolors="white", linewidths=1, zorder=4)
        for city, x, y in zip(event.cities, px, py):
            ax.annotate(
                city.name,
                (x, y),
                textcoords="offset points",
                xytext=(0, -12),
                ha="center",
                fontsize=7,
                color="white",
                zorder=5,
            )

    all_x = np.concatenate([nx, sx, cx])
    all_y = np.concatenate([ny, sy, cy])
    if all_x.size:
        ax.set_xlim(all_x.min() - _PAD, all_x.max() + _PAD)
        ax.set_ylim(all_y.min() - _PAD, all_y.max() + _PAD)
    ax.set_aspect("equal")
    ax.set_title(event.title, color="white")
    ax.axis("off")

    return fig


def save_static_map(event: EclipseEvent, output_path: Path | None = None) -> Path:
    """Save an eclipse path map as a PNG file.

    Args:
        event: The eclipse to draw.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / f"eclipse_{event.id}__{event.date}.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_map(event)
    try:
        fig.savefig(output_path, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
    return output_path
