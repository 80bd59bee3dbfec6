"""Metrics collection engine for hostmon."""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any

import psutil

from hostmon.models import ProcessSample, SystemSnapshot, round_percent
from hostmon.probes import probe_cpu_model, probe_memory_type

logger = logging.getLogger(__name__)

MAX_PROCESSES = 20

PROCESS_ATTRS = ["pid", "name", "cpu_percent", "memory_percent", "memory_info"]


@dataclass(slots=True, frozen=True)
class NetworkCounterState:
    """Cumulative network counters from the previous sampling cycle."""

    bytes_received: int
    bytes_sent: int
    sample_time: float  # Seconds on the sampler's clock


def compute_rate(current: int, previous: int, elapsed: float) -> int:
    """
    Byte rate between two cumulative counter readings, floored to an integer.

    A counter that went backwards (interface reset or wraparound) and a
    non-positive interval both give 0.
    """
    if elapsed <= 0 or current < previous:
        return 0
    return int((current - previous) / elapsed)


def rank_processes(
    processes: Iterable[ProcessSample],
    limit: int = MAX_PROCESSES,
) -> tuple[ProcessSample, ...]:
    """Top ``limit`` processes by CPU usage; ties keep enumeration order."""
    ranked = sorted(processes, key=lambda p: p.cpu_percent, reverse=True)
    return tuple(ranked[:limit])


class Sampler:
    """
    Produces one SystemSnapshot per call to collect().

    Every metrics domain is queried independently. A failing domain is logged
    and leaves its own fields at their zero values; collect() itself never
    raises. The only state kept between calls is the network counter baseline
    used to derive throughput.
    """

    def __init__(
        self,
        provider: Any = psutil,
        clock: Callable[[], float] = time.monotonic,
        memory_type_probe: Callable[[], str] = probe_memory_type,
        cpu_model_probe: Callable[[], str] = probe_cpu_model,
        root_path: str = "/",
        max_processes: int = MAX_PROCESSES,
        network_state: NetworkCounterState | None = None,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            provider: OS counter provider with the psutil module's API.
            clock: Time source for rate derivation, in seconds.
            memory_type_probe: Resolves the memory module type string.
            cpu_model_probe: Resolves the CPU model name.
            root_path: Filesystem whose usage and type are reported.
            max_processes: Length cap for the process list (at most 20).
            network_state: Counter baseline from an earlier cycle, if any.
        """
        self._provider = provider
        self._clock = clock
        self._memory_type_probe = memory_type_probe
        self._cpu_model_probe = cpu_model_probe
        self._root_path = root_path
        self._max_processes = max(1, min(max_processes, MAX_PROCESSES))
        self._network_state = network_state
        # First non-blocking call returns 0.0; prime it so the first sample is real
        try:
            self._provider.cpu_percent(interval=None)
        except Exception as exc:
            logger.warning("Could not prime CPU percent: %s", exc)

    @property
    def network_state(self) -> NetworkCounterState | None:
        """Counter baseline the next cycle will derive rates from."""
        return self._network_state

    def collect(self) -> SystemSnapshot:
        """Collect a snapshot of the current system state."""
        fields: dict[str, Any] = {}
        fields.update(self._guarded("CPU usage", self._collect_cpu_usage))
        fields.update(self._guarded("CPU model", self._collect_cpu_model))
        fields.update(self._guarded("CPU core count", self._collect_cpu_cores))
        fields.update(self._guarded("CPU thread count", self._collect_cpu_threads))
        fields.update(self._guarded("memory", self._collect_memory))
        fields.update(self._guarded("memory type", self._collect_memory_type))
        fields.update(self._guarded("disk usage", self._collect_disk_usage))
        fields.update(self._guarded("disk partitions", self._collect_disk_fstype))
        fields.update(self._guarded("network", self._collect_network))
        fields.update(self._guarded("processes", self._collect_processes))
        return replace(SystemSnapshot.empty(), **fields)

    def _guarded(self, domain: str, collector: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        try:
            return collector()
        except Exception as exc:
            logger.warning("Error collecting %s: %s", domain, exc)
            return {}

    def _collect_cpu_usage(self) -> dict[str, Any]:
        # Non-blocking: compares against the previous call's CPU times
        percent = self._provider.cpu_percent(interval=None)
        return {"cpu_usage_percent": round_percent(percent)}

    def _collect_cpu_model(self) -> dict[str, Any]:
        return {"cpu_model": self._cpu_model_probe()}

    def _collect_cpu_cores(self) -> dict[str, Any]:
        return {"cpu_physical_cores": self._provider.cpu_count(logical=False) or 0}

    def _collect_cpu_threads(self) -> dict[str, Any]:
        return {"cpu_logical_threads": self._provider.cpu_count(logical=True) or 0}

    def _collect_memory(self) -> dict[str, Any]:
        mem = self._provider.virtual_memory()
        return {
            "memory_total_bytes": mem.total,
            "memory_used_bytes": mem.used,
            "memory_usage_percent": round_percent(mem.percent),
        }

    def _collect_memory_type(self) -> dict[str, Any]:
        return {"memory_type": self._memory_type_probe()}

    def _collect_disk_usage(self) -> dict[str, Any]:
        usage = self._provider.disk_usage(self._root_path)
        return {
            "disk_total_bytes": usage.total,
            "disk_used_bytes": usage.used,
            "disk_usage_percent": round_percent(usage.percent),
        }

    def _collect_disk_fstype(self) -> dict[str, Any]:
        for partition in self._provider.disk_partitions(all=False):
            if partition.mountpoint == self._root_path:
                return {"disk_filesystem_type": partition.fstype}
        return {}

    def _collect_network(self) -> dict[str, Any]:
        """
        Derive throughput from the change in cumulative counters.

        The baseline is replaced whenever counters could be read, including
        on the first cycle where no rate can be derived yet.
        """
        counters = self._provider.net_io_counters(pernic=False)
        if counters is None:
            # psutil reports no network interfaces this way
            return {}

        current = NetworkCounterState(
            bytes_received=counters.bytes_recv,
            bytes_sent=counters.bytes_sent,
            sample_time=self._clock(),
        )
        previous = self._network_state
        self._network_state = current

        if previous is None:
            return {}

        elapsed = current.sample_time - previous.sample_time
        return {
            "network_in_rate_bytes_per_sec": compute_rate(
                current.bytes_received, previous.bytes_received, elapsed
            ),
            "network_out_rate_bytes_per_sec": compute_rate(
                current.bytes_sent, previous.bytes_sent, elapsed
            ),
        }

    def _collect_processes(self) -> dict[str, Any]:
        """
        Collect the busiest processes.

        Processes whose name cannot be read, or that exit mid-enumeration,
        are skipped.
        """
        processes: list[ProcessSample] = []

        for proc in self._provider.process_iter(attrs=PROCESS_ATTRS):
            try:
                info = proc.info

                # AccessDenied on an attribute leaves it as None
                name = info.get("name")
                if name is None:
                    continue

                mem_info = info.get("memory_info")
                processes.append(
                    ProcessSample(
                        pid=info.get("pid", proc.pid),
                        name=name,
                        cpu_percent=round_percent(info.get("cpu_percent") or 0.0),
                        memory_percent=round_percent(info.get("memory_percent") or 0.0),
                        memory_resident_bytes=mem_info.rss if mem_info else 0,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return {"processes": rank_processes(processes, self._max_processes)}
