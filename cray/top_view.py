"""Top tab of the process workspace: per-process CPU, memory and I/O."""

from __future__ import annotations

import threading
from contextlib import suppress
from dataclasses import replace
from enum import Enum

from cray.models import NetworkStats, Process, ProcessTop, Runtime
from cray.widgets import Column, Key, KeyEvent, Table, TextView

_KB = 1024.0
_MB = _KB * 1024
_GB = _MB * 1024
_COMMAND_WIDTH = 60

TOP_COLUMNS = [
    Column("PID", 8, "right"),
    Column("PPID", 8, "right"),
    Column("STATE", 6),
    Column("CPU%", 8, "right"),
    Column("MEM%", 8, "right"),
    Column("RSS", 10, "right"),
    Column("R/s", 10, "right"),
    Column("W/s", 10, "right"),
    Column("READ", 10, "right"),
    Column("WRITE", 10, "right"),
    Column("COMMAND", 0),
]


class SortField(Enum):
    """Column the process table is ordered by."""

    CPU = "CPU"
    MEM = "MEM"
    PID = "PID"
    IO = "I/O"


_SORT_KEYS = {"c": SortField.CPU, "m": SortField.MEM, "p": SortField.PID, "i": SortField.IO}


class TopView:
    """Shows a top-like, periodically refreshed table of a container's processes."""

    def __init__(self, runtime: Runtime | None = None, refresh_interval: float = 2.0) -> None:
        self.runtime = runtime
        self.refresh_interval = refresh_interval
        self.container_id = ""
        self.top_data: ProcessTop | None = None
        self.sort_field = SortField.CPU
        self.refresh_running = False
        self._stop: threading.Event | None = None
        self._lock = threading.Lock()
        self.net_bar = TextView()
        self.table = Table(TOP_COLUMNS)
        self.status_bar = TextView()
        self.net_bar.text = " [gray]Network: waiting for data...[-]"
        self._update_status_bar()

    def set_container(self, container_id: str) -> None:
        """Set the container to monitor."""
        with self._lock:
            self.container_id = container_id

    def refresh(self) -> None:
        """Load a top sample of the active container and redraw; runtime errors propagate."""
        with self._lock:
            container_id = self.container_id
        if not container_id:
            return
        if self.runtime is None:
            raise RuntimeError("no runtime configured")
        top = self.runtime.get_container_top(container_id)
        with self._lock:
            self.top_data = top
        self._render()

    def handle_input(self, event: KeyEvent | None) -> KeyEvent | None:
        """Change the sort column on c/m/p/i; return the event if not consumed."""
        if event is None:
            return None
        if event.key is Key.CTRL_C:
            return event
        if event.key is Key.RUNE:
            field = _SORT_KEYS.get(event.rune.lower())
            if field is not None:
                self.set_sort_field(field)
                return None
        return event

    def set_sort_field(self, field: SortField) -> None:
        """Change the sort column and redraw."""
        with self._lock:
            self.sort_field = field
        self._render()

    def start_auto_refresh(self) -> None:
        """Start refreshing periodically; does nothing if already running."""
        with self._lock:
            if self.refresh_running:
                return
            self.refresh_running = True
            stop = threading.Event()
            self._stop = stop
        threading.Thread(target=self._auto_refresh_loop, args=(stop,), daemon=True).start()

    def stop_auto_refresh(self) -> None:
        """Stop periodic refreshing; does nothing if not running."""
        with self._lock:
            if self.refresh_running and self._stop is not None:
                self._stop.set()
                self.refresh_running = False
                self._stop = None

    def focus_primitive(self) -> Table:
        """Return the widget that takes focus."""
        return self.table

    def snapshot(self) -> tuple[ProcessTop | None, int]:
        """Return a copy of the current sample and its process count."""
        with self._lock:
            if self.top_data is None:
                return None, 0
            copy = replace(
                self.top_data,
                processes=list(self.top_data.processes),
                network_io=list(self.top_data.network_io),
            )
        return copy, len(copy.processes)

    def _auto_refresh_loop(self, stop: threading.Event) -> None:
        try:
            while not stop.wait(self.refresh_interval):
                # A failed tick is retried on the next one.
                with suppress(Exception):
                    self.refresh()
        finally:
            with self._lock:
                if self._stop is stop:
                    self.refresh_running = False
                    self._stop = None

    def _render(self) -> None:
        with self._lock:
            if self.top_data is None:
                return
            processes = list(self.top_data.processes)
            network_io = list(self.top_data.network_io)
            cpu_cores = self.top_data.cpu_cores
            memory_limit = self.top_data.memory_limit
            field = self.sort_field

        self.table.clear_data()
        for process in sort_processes(processes, field):
            command = process.command
            if process.args:
                command = process.command + " " + " ".join(process.args)
            if len(command) > _COMMAND_WIDTH:
                command = command[: _COMMAND_WIDTH - 3] + "..."
            self.table.add_row(
                str(process.pid),
                str(process.ppid),
                process.state,
                f"{process.cpu_percent:.1f}",
                f"{process.memory_percent:.1f}",
                _format_bytes(process.memory_rss),
                format_rate(process.read_bytes_per_sec),
                format_rate(process.write_bytes_per_sec),
                _format_bytes(process.read_bytes),
                _format_bytes(process.write_bytes),
                command,
            )
        self._update_net_bar(network_io, cpu_cores, memory_limit)
        self._update_status_bar()

    def _update_net_bar(
        self, network_io: list[NetworkStats], cpu_cores: float, memory_limit: int
    ) -> None:
        parts: list[str] = []
        if cpu_cores > 0:
            parts.append(f"[gray]CPU Limit:[aqua]{cpu_cores:.2f} cores[-]")
        if memory_limit > 0:
            parts.append(f"[gray]Mem Limit:[aqua]{_format_bytes(memory_limit)}[-]")
        for stats in network_io:
            parts.append(
                f"[gray]{stats.interface} "
                f"[green]↓[white]{format_rate(stats.rx_bytes_per_sec)}"
                f"[gray]({_format_bytes(stats.rx_bytes)}) "
                f"[red]↑[white]{format_rate(stats.tx_bytes_per_sec)}"
                f"[gray]({_format_bytes(stats.tx_bytes)})[-]"
            )
        if not parts:
            self.net_bar.text = " [gray]Network: no active interfaces[-]"
            return
        self.net_bar.text = " " + "  ".join(parts)

    def _update_status_bar(self) -> None:
        with self._lock:
            field = self.sort_field
            count = len(self.top_data.processes) if self.top_data is not None else 0
        self.status_bar.text = (
            f" [white]Top: [green]{count}[white]  |  [aqua]hotspot sort[-]: {field.value}  |  "
            "[yellow]c[white]:cpu [yellow]m[white]:mem [yellow]p[white]:pid [yellow]i[white]:io"
        )


def sort_processes(processes: list[Process], field: SortField) -> list[Process]:
    """Return processes ordered by the given field (PID ascending, others descending)."""
    if field is SortField.PID:
        return sorted(processes, key=lambda p: p.pid)
    if field is SortField.MEM:
        return sorted(processes, key=lambda p: p.memory_percent, reverse=True)
    if field is SortField.IO:
        return sorted(
            processes,
            key=lambda p: p.read_bytes_per_sec + p.write_bytes_per_sec,
            reverse=True,
        )
    return sorted(processes, key=lambda p: p.cpu_percent, reverse=True)


def format_rate(bytes_per_sec: float) -> str:
    """Format a bytes-per-second value as a short rate."""
    if bytes_per_sec < 1:
        return "0 B/s"
    if bytes_per_sec >= _GB:
        return f"{bytes_per_sec / _GB:.1f} G/s"
    if bytes_per_sec >= _MB:
        return f"{bytes_per_sec / _MB:.1f} M/s"
    if bytes_per_sec >= _KB:
        return f"{bytes_per_sec / _KB:.1f} K/s"
    return f"{bytes_per_sec:.0f} B/s"


def _format_bytes(count: int) -> str:
    value = float(count)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(value) < _KB:
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= _KB
    return f"{value:.1f} TB"