"""Configuration system for sar-pcp."""

from collections.abc import Callable
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

from sar_pcp.activities import MemoryOptions
from sar_pcp.engine import ACTIVITY_NAMES, ExportOptions
from sar_pcp.filters import CpuBitmap, ItemList, real_cpus_only


@dataclass
class ExportConfig:
    """Which activities to export."""

    activities: list[str] = field(default_factory=lambda: list(ACTIVITY_NAMES))


@dataclass
class CpuConfig:
    """CPU selection.

    cpus lists 0-based CPU numbers; an empty list selects every CPU.
    include_all controls the "all" aggregate.
    """

    cpus: list[int] = field(default_factory=list)
    include_all: bool = True


@dataclass
class MemoryConfig:
    """Memory and swap field selection."""

    show_memory: bool = True
    show_swap: bool = True
    extended: bool = False  # Anon pages, slab, kernel stack, page tables, vmused


@dataclass
class NetworkConfig:
    """Network interface selection. An empty list exports every interface."""

    interfaces: list[str] = field(default_factory=list)


@dataclass
class SystemConfig:
    """Logging configuration."""

    log_max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    log_backup_count: int = 3  # Number of backup log files to keep


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


@dataclass
class Config:
    """Main configuration container."""

    export: ExportConfig = field(default_factory=ExportConfig)
    cpu: CpuConfig = field(default_factory=CpuConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    system: SystemConfig = field(default_factory=SystemConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "sar-pcp"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "sar-pcp"

    @property
    def log_path(self) -> Path:
        """JSON log path."""
        return self.state_dir / "sar-pcp.log"

    def export_options(self, nr_cpu_ini: int | None = None) -> ExportOptions:
        """Build the options for an export pass.

        Args:
            nr_cpu_ini: CPU positions including "all" (i.e. CPU count + 1).
                Used to size the CPU bitmap.
        """
        cpu_visible: Callable[[int], bool] | None = None
        if not self.cpu.cpus and not self.cpu.include_all:
            cpu_visible = real_cpus_only
        elif self.cpu.cpus:
            cpu_visible = CpuBitmap.from_cpus(
                self.cpu.cpus,
                nr_cpu=max((nr_cpu_ini or 0) - 1, 0),
                include_all=self.cpu.include_all,
            )

        return ExportOptions(
            activities=tuple(self.export.activities),
            cpu_visible=cpu_visible,
            interface_visible=ItemList(self.network.interfaces) if self.network.interfaces else None,
            memory=MemoryOptions(
                show_memory=self.memory.show_memory,
                show_swap=self.memory.show_swap,
                extended=self.memory.extended,
            ),
            nr_cpu_ini=nr_cpu_ini,
        )

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("export", "cpu", "memory", "network", "system"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions, so Config() and
        Config.load() of an empty file are identical.

        Raises:
            ValueError: If the file cannot be parsed or holds invalid values.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            export=_load_export_config(_section(data, "export")),
            cpu=_load_cpu_config(_section(data, "cpu")),
            memory=_load_memory_config(_section(data, "memory")),
            network=_load_network_config(_section(data, "network")),
            system=_load_system_config(_section(data, "system")),
        )


def _section(data: dict, name: str) -> dict:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"[{name}] must be a table, got {section!r}")
    return section


def _require_bool(section: str, key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _require_list(section: str, key: str, value: object) -> list:
    if not isinstance(value, list):
        raise ValueError(f"{section}.{key} must be a list, got {value!r}")
    return value


def _require_count(section: str, key: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{section}.{key} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{section}.{key} must be >= 0, got {value}")
    return value


def _load_export_config(data: dict) -> ExportConfig:
    """Load export config, rejecting unknown activity names."""
    defaults = ExportConfig()
    activities = _require_list("export", "activities", data.get("activities", defaults.activities))
    unknown = [a for a in activities if a not in ACTIVITY_NAMES]
    if unknown:
        raise ValueError(
            f"Invalid activities: {unknown!r}. Must be among {list(ACTIVITY_NAMES)}"
        )
    return ExportConfig(activities=list(activities))


def _load_cpu_config(data: dict) -> CpuConfig:
    """Load CPU selection config."""
    defaults = CpuConfig()
    cpus = _require_list("cpu", "cpus", data.get("cpus", defaults.cpus))
    for cpu in cpus:
        if isinstance(cpu, bool) or not isinstance(cpu, int) or cpu < 0:
            raise ValueError(f"cpus entries must be integers >= 0, got {cpu!r}")
    return CpuConfig(
        cpus=list(cpus),
        include_all=_require_bool(
            "cpu", "include_all", data.get("include_all", defaults.include_all)
        ),
    )


def _load_memory_config(data: dict) -> MemoryConfig:
    """Load memory field selection config."""
    d = MemoryConfig()
    return MemoryConfig(
        show_memory=_require_bool("memory", "show_memory", data.get("show_memory", d.show_memory)),
        show_swap=_require_bool("memory", "show_swap", data.get("show_swap", d.show_swap)),
        extended=_require_bool("memory", "extended", data.get("extended", d.extended)),
    )


def _load_network_config(data: dict) -> NetworkConfig:
    """Load network interface selection config."""
    d = NetworkConfig()
    interfaces = _require_list("network", "interfaces", data.get("interfaces", d.interfaces))
    for name in interfaces:
        if not isinstance(name, str):
            raise ValueError(f"interfaces entries must be strings, got {name!r}")
    return NetworkConfig(interfaces=list(interfaces))


def _load_system_config(data: dict) -> SystemConfig:
    """Load logging config."""
    d = SystemConfig()
    return SystemConfig(
        log_max_bytes=_require_count(
            "system", "log_max_bytes", data.get("log_max_bytes", d.log_max_bytes)
        ),
        log_backup_count=_require_count(
            "system", "log_backup_count", data.get("log_backup_count", d.log_backup_count)
        ),
    )
