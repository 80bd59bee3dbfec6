"""Data models for hostmon."""

from dataclasses import asdict, dataclass
from typing import Any


def round_percent(value: float) -> float:
    """Round a percentage to two decimal places."""
    return round(float(value), 2)


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable sample of one process's resource usage."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float
    memory_resident_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class SystemSnapshot:
    """Immutable result of one sampling cycle."""

    cpu_usage_percent: float
    cpu_model: str
    cpu_physical_cores: int
    cpu_logical_threads: int
    memory_total_bytes: int
    memory_used_bytes: int
    memory_usage_percent: float
    memory_type: str
    disk_total_bytes: int
    disk_used_bytes: int
    disk_usage_percent: float
    disk_filesystem_type: str
    network_in_rate_bytes_per_sec: int
    network_out_rate_bytes_per_sec: int
    processes: tuple[ProcessSample, ...]

    @classmethod
    def empty(cls) -> "SystemSnapshot":
        """Snapshot with every field at its degraded value."""
        return cls(
            cpu_usage_percent=0.0,
            cpu_model="",
            cpu_physical_cores=0,
            cpu_logical_threads=0,
            memory_total_bytes=0,
            memory_used_bytes=0,
            memory_usage_percent=0.0,
            memory_type="Unknown",
            disk_total_bytes=0,
            disk_used_bytes=0,
            disk_usage_percent=0.0,
            disk_filesystem_type="",
            network_in_rate_bytes_per_sec=0,
            network_out_rate_bytes_per_sec=0,
            processes=(),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready record keyed by field name."""
        data = asdict(self)
        data["processes"] = [proc.to_dict() for proc in self.processes]
        return data
