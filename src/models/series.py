# src/models/series.py

"""Chart-ready price series."""

from dataclasses import dataclass, field


@dataclass
class ChartSeries:
    """Parallel label/value sequences handed to the chart exporter."""

    labels: list[str] = field(default_factory=lambda: list[str]())
    values: list[int] = field(default_factory=lambda: list[int]())

    def __len__(self) -> int:
        return len(self.values)
