"""Metric sink contract and in-process sink adapters.

The exporters only ever call ``put_value(name, instance, value)``; encoding
the values (PCP archive, time-series database, ...) is the sink's business.
"""

from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Protocol, runtime_checkable

import structlog

if TYPE_CHECKING:
    from sar_pcp.catalog import MetricDef

log = structlog.get_logger()


@runtime_checkable
class MetricSink(Protocol):
    """Anything that accepts named metric values."""

    def put_value(self, metric_name: str, instance: str | None, value: str) -> None: ...


@dataclass(frozen=True, slots=True)
class MetricRecord:
    """One exported value."""

    name: str
    instance: str | None
    value: str

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return {"name": self.name, "instance": self.instance, "value": self.value}

    def __str__(self) -> str:
        if self.instance is None:
            return f"{self.name} {self.value}"
        return f"{self.name}[{self.instance}] {self.value}"


def format_float(value: float) -> str:
    """Render a computed value the way printf("%f") does."""
    return f"{value:f}"


def format_int(value: int) -> str:
    """Render a gauge as a plain integer."""
    return str(int(value))


class ListSink:
    """Sink that keeps every record in memory, in emission order."""

    def __init__(self) -> None:
        self.records: list[MetricRecord] = []
        self.defined: list["MetricDef"] = []

    def __len__(self) -> int:
        return len(self.records)

    def put_value(self, metric_name: str, instance: str | None, value: str) -> None:
        self.records.append(MetricRecord(metric_name, instance, value))

    def add_metric(self, defn: "MetricDef") -> None:
        self.defined.append(defn)

    def names(self) -> list[str]:
        """Return the distinct metric names in emission order."""
        return list(dict.fromkeys(r.name for r in self.records))

    def instances(self, metric_name: str) -> list[str | None]:
        """Return the instance labels emitted for a metric."""
        return [r.instance for r in self.records if r.name == metric_name]

    def values(self, metric_name: str) -> dict[str | None, str]:
        """Return {instance: value} for a metric (last value wins)."""
        return {r.instance: r.value for r in self.records if r.name == metric_name}

    def value(self, metric_name: str, instance: str | None = None) -> str:
        """Return the value of one metric instance.

        Raises:
            KeyError: If the metric instance was never emitted.
        """
        values = self.values(metric_name)
        if instance not in values:
            raise KeyError(f"{metric_name}[{instance}] not emitted")
        return values[instance]

    def clear(self) -> None:
        self.records.clear()


class StreamSink:
    """Sink that writes one ``name[instance] value`` line per value."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream
        self.count = 0

    def put_value(self, metric_name: str, instance: str | None, value: str) -> None:
        self._stream.write(f"{MetricRecord(metric_name, instance, value)}\n")
        self.count += 1


class LogSink:
    """Sink that emits each value as a structlog event."""

    def __init__(self, event: str = "metric_value") -> None:
        self._event = event

    def put_value(self, metric_name: str, instance: str | None, value: str) -> None:
        log.info(self._event, metric=metric_name, instance=instance, value=value)
