from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class ChartColors:
    Blue = '#5b8ff9'
    BlueLight = '#9ec5fe'
    Green = '#5ad8a6'
    Orange = '#f6903d'
    Red = '#e86452'
    Purple = '#945fb9'
    Grey = '#9ca3af'
    Black = '#1f2937'


@dataclass
class LineChartOptions:
    width: int = 650
    height: int = 350
    line_color: str = ChartColors.Blue
    stroke_width: float = 2.0
    x_axis_label: Optional[str] = None
    y_axis_label: Optional[str] = None
    title: Optional[str] = None
    show_points: bool = True


@dataclass
class MultiLineChartOptions:
    width: int = 650
    height: int = 350
    colors: list[str] = field(default_factory=lambda: [ChartColors.Blue, ChartColors.Red, ChartColors.Green])
    categories: list[str] = field(default_factory=list)
    stroke_width: float = 2.0
    x_axis_label: Optional[str] = None
    y_axis_label: Optional[str] = None
    title: Optional[str] = None
