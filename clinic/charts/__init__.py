from .chart_generator import ChartGenerator  # noqa: F401
from .options import ChartColors, LineChartOptions, MultiLineChartOptions  # noqa: F401
