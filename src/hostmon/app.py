"""hostmon - Terminal dashboard over the latest snapshot."""

from enum import Enum

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from hostmon.models import ProcessSample, SystemSnapshot
from hostmon.monitor import SystemMonitor


class SortKey(Enum):
    """Sort keys for the process table."""

    CPU = "cpu"
    MEM = "mem"
    PID = "pid"
    NAME = "name"


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_rate(rate: int) -> str:
    """Format a byte rate as human-readable string."""
    return f"{format_bytes(rate).strip()}/s"


def usage_bar(percent: float, color: str, width: int = 20) -> str:
    """Render a percentage as a fixed-width bar in Textual markup."""
    filled = min(int(percent / (100 / width)), width)
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (width - filled)


class HeaderStats(Static):
    """Header widget showing CPU, memory, disk and network statistics."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: SystemSnapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_storage_info(), id="storage-info"),
        )

    def update_stats(self, snapshot: SystemSnapshot) -> None:
        """Update the statistics from a system snapshot."""
        self._snapshot = snapshot
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            cpu_info = self.query_one("#cpu-info", Static)
            storage_info = self.query_one("#storage-info", Static)
        except NoMatches:
            return  # Widget not mounted yet
        cpu_info.update(self._get_cpu_info())
        storage_info.update(self._get_storage_info())

    def _get_cpu_info(self) -> str:
        """Get CPU and network display."""
        snap = self._snapshot
        if snap is None:
            return "Waiting for first sample..."
        model = snap.cpu_model or "Unknown CPU"
        # Use escaped brackets for the bar container
        return (
            f"CPU \\[{usage_bar(snap.cpu_usage_percent, 'green')}] "
            f"{snap.cpu_usage_percent:5.1f}%\n"
            f"{model}\n"
            f"{snap.cpu_physical_cores} cores / {snap.cpu_logical_threads} threads\n"
            f"Net in: {format_rate(snap.network_in_rate_bytes_per_sec)}  "
            f"out: {format_rate(snap.network_out_rate_bytes_per_sec)}"
        )

    def _get_storage_info(self) -> str:
        """Get memory and disk display."""
        snap = self._snapshot
        if snap is None:
            return ""
        return (
            f"Mem \\[{usage_bar(snap.memory_usage_percent, 'cyan')}] "
            f"{format_bytes(snap.memory_used_bytes)}/{format_bytes(snap.memory_total_bytes)}\n"
            f"Memory type: {snap.memory_type}\n"
            f"Dsk \\[{usage_bar(snap.disk_usage_percent, 'yellow')}] "
            f"{format_bytes(snap.disk_used_bytes)}/{format_bytes(snap.disk_total_bytes)}\n"
            f"Filesystem: {snap.disk_filesystem_type or '-'}"
        )


class ProcessTable(Container):
    """Container for the top-process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._sort_key: SortKey = SortKey.CPU
        self._sort_reverse: bool = True  # Default: descending for CPU

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        next_index = (keys.index(self._sort_key) + 1) % len(keys)
        self._sort_key = keys[next_index]
        self._sort_reverse = self._sort_key in (SortKey.CPU, SortKey.MEM)
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("CPU%", key="cpu", width=8)
        table.add_column("MEM%", key="mem", width=8)
        table.add_column("RES", key="rss", width=8)
        table.add_column("Name", key="name")

    def update_processes(self, processes: tuple[ProcessSample, ...]) -> None:
        """
        Replace the table rows with the given processes.

        The snapshot only carries the busiest processes, so membership changes
        every cycle and rows are rebuilt in sorted order.
        """
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for proc in self._sort_processes(processes):
            table.add_row(
                str(proc.pid),
                f"{proc.cpu_percent:5.1f}",
                f"{proc.memory_percent:5.1f}",
                format_bytes(proc.memory_resident_bytes),
                proc.name[:50],
                key=str(proc.pid),
            )

    def _sort_processes(self, processes: tuple[ProcessSample, ...]) -> list[ProcessSample]:
        """Sort processes based on the current sort key."""
        key_func = {
            SortKey.CPU: lambda p: p.cpu_percent,
            SortKey.MEM: lambda p: p.memory_percent,
            SortKey.PID: lambda p: p.pid,
            SortKey.NAME: lambda p: p.name.lower(),
        }
        return sorted(processes, key=key_func[self._sort_key], reverse=self._sort_reverse)


class HostmonApp(App):
    """Main hostmon dashboard."""

    TITLE = "hostmon"
    SUB_TITLE = "Host Resource Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #storage-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, monitor: SystemMonitor) -> None:
        """Initialize the HostmonApp."""
        super().__init__()
        self._monitor = monitor
        self._shown: SystemSnapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Read the store and refresh the UI when a new snapshot is there."""
        snapshot = self._monitor.store.read()
        if snapshot is None or snapshot is self._shown:
            return
        self._shown = snapshot
        self._update_ui(snapshot)

    def _update_ui(self, snapshot: SystemSnapshot) -> None:
        """Update the UI with the new system snapshot."""
        self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
        self.query_one(ProcessTable).update_processes(snapshot.processes)

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        process_table = self.query_one(ProcessTable)
        new_sort_key = process_table.cycle_sort()
        if self._shown is not None:
            process_table.update_processes(self._shown.processes)
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
