"""JSON sample files: one sampling instant of raw counters per file.

Format::

    {
      "uptime_cs": 123456,          # uptime in 1/100 s at sampling time
      "nr_cpu": 4,                  # optional, CPU count excluding "all"
      "activities": {
        "cpu": [{"user": ...}, ...],   # per-entity activities: a list
        "memory": {"frmkb": ...},      # global activities: one object
        ...
      }
    }
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from sar_pcp.engine import StatsExporter, UnknownActivityError, get_activity
from sar_pcp.records import StatsRecord


class SampleFileError(ValueError):
    """Raised when a sample file cannot be read or is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


@dataclass
class Sample:
    """Raw counters of every activity at one sampling instant."""

    uptime_cs: int
    nr_cpu: int | None = None
    activities: dict[str, list[StatsRecord]] = field(default_factory=dict)

    @property
    def nr_cpu_ini(self) -> int | None:
        """CPU positions including "all"."""
        if self.nr_cpu is not None:
            return self.nr_cpu + 1
        cpu = self.activities.get("cpu")
        return len(cpu) if cpu else None

    def push_into(self, exporter: StatsExporter, only: Iterable[str] | None = None) -> None:
        """Push the activities of this sample into an exporter.

        Args:
            exporter: Exporter receiving the records
            only: Activity names to push (default: every activity of the sample)
        """
        for name, records in self.activities.items():
            if only is not None and name not in only:
                continue
            exporter.push(name, records)


def interval_between(previous: Sample, current: Sample) -> int:
    """Return the elapsed time between two samples in 1/100 s (never negative)."""
    return max(current.uptime_cs - previous.uptime_cs, 0)


def parse_sample(data: object, path: Path) -> Sample:
    """Build a Sample from decoded JSON.

    Raises:
        SampleFileError: On any structural problem.
    """
    if not isinstance(data, dict):
        raise SampleFileError(path, "top level must be an object")

    uptime = data.get("uptime_cs", 0)
    if isinstance(uptime, bool) or not isinstance(uptime, int) or uptime < 0:
        raise SampleFileError(path, f"uptime_cs must be a non-negative integer, got {uptime!r}")

    nr_cpu = data.get("nr_cpu")
    if nr_cpu is not None and (isinstance(nr_cpu, bool) or not isinstance(nr_cpu, int)):
        raise SampleFileError(path, f"nr_cpu must be an integer, got {nr_cpu!r}")

    raw_activities = data.get("activities", {})
    if not isinstance(raw_activities, dict):
        raise SampleFileError(path, "activities must be an object")

    activities: dict[str, list[StatsRecord]] = {}
    for name, raw in raw_activities.items():
        try:
            activity = get_activity(name)
        except UnknownActivityError as e:
            raise SampleFileError(path, str(e)) from e

        items = raw if isinstance(raw, list) else [raw]
        if not activity.multi and len(items) > 1:
            raise SampleFileError(path, f"{name} takes a single record, got {len(items)}")

        records = []
        for item in items:
            if not isinstance(item, dict):
                raise SampleFileError(path, f"{name} records must be objects")
            try:
                records.append(activity.record_type.from_dict(item))
            except ValueError as e:
                raise SampleFileError(path, str(e)) from e
        activities[name] = records

    return Sample(uptime_cs=uptime, nr_cpu=nr_cpu, activities=activities)


def load_sample(path: Path) -> Sample:
    """Read and validate a sample file.

    Raises:
        SampleFileError: If the file is unreadable, not JSON, or malformed.
    """
    try:
        text = path.read_text()
    except OSError as e:
        raise SampleFileError(path, f"cannot read file: {e.strerror or e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SampleFileError(path, f"invalid JSON: {e}") from e

    return parse_sample(data, path)
