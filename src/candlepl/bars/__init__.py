"""Bar data model, resampling, and price loading."""

from .series import Bar, BarSeries, MalformedSeriesError, Span  # noqa: F401
from .resample import ResolutionTuple, build_resolution_tuple, resample_bars  # noqa: F401
from .csv_loader import load_bars_csv  # noqa: F401
