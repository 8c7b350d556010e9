"""
Line chart rendering with matplotlib.

Charts are written as PNG files below ``REPORTS_DIR`` and the path is
returned; ``None`` is returned when there is nothing to draw.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import matplotlib

matplotlib.use('Agg')
import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
from django.conf import settings  # noqa: E402

from .options import LineChartOptions, MultiLineChartOptions  # noqa: E402

logger = logging.getLogger(__name__)

DPI = 100


class ChartGenerator:

    def __init__(self, output_dir: Path | str | None = None):
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return Path(self._output_dir or settings.REPORTS_DIR)

    def _path(self, filename: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if not filename.endswith('.png'):
            filename += '.png'
        return self.output_dir / filename

    def _figure(self, width: int, height: int, title: Optional[str], x_label: Optional[str], y_label: Optional[str]):
        fig, ax = plt.subplots(figsize=(width / DPI, height / DPI), dpi=DPI)
        if title:
            ax.set_title(title)
        if x_label:
            ax.set_xlabel(x_label)
        if y_label:
            ax.set_ylabel(y_label)
        ax.grid(True, alpha=0.3)
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%b %d'))
        fig.autofmt_xdate()
        return fig, ax

    def _save(self, fig, filename: str) -> Path:
        path = self._path(filename)
        fig.tight_layout()
        fig.savefig(path, format='png')
        plt.close(fig)
        logger.debug('Chart written to %s', path)
        return path

    def create_line_chart(self, points: Sequence[tuple], options: LineChartOptions, filename: str) -> Optional[Path]:
        """Render ``(x, y)`` points as one line."""
        if not points:
            return None
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        fig, ax = self._figure(options.width, options.height, options.title,
                               options.x_axis_label, options.y_axis_label)
        ax.plot(xs, ys, color=options.line_color, linewidth=options.stroke_width,
                marker='o' if options.show_points else None)
        return self._save(fig, filename)

    def create_multi_line_chart(self, points: Sequence[tuple], options: MultiLineChartOptions,
                                filename: str) -> Optional[Path]:
        """Render ``(x, y, category)`` points as one line per category."""
        if not points:
            return None
        categories = options.categories or sorted({p[2] for p in points})
        fig, ax = self._figure(options.width, options.height, options.title,
                               options.x_axis_label, options.y_axis_label)
        for i, category in enumerate(categories):
            series = [p for p in points if p[2] == category]
            if not series:
                continue
            color = options.colors[i % len(options.colors)] if options.colors else None
            ax.plot([p[0] for p in series], [p[1] for p in series], color=color,
                    linewidth=options.stroke_width, marker='o', label=category)
        ax.legend(loc='best')
        return self._save(fig, filename)
