import threading
import time

import pytest

from cray.models import NetworkStats, Process, ProcessTop
from cray.top_view import SortField, TopView, format_rate, sort_processes
from cray.widgets import Key, KeyEvent


class StubRuntime:
    def __init__(self, top=None, error=None):
        self.top = top if top is not None else ProcessTop()
        self.error = error
        self.calls = 0
        self._lock = threading.Lock()

    def get_container_runtime_info(self, container_id):
        raise AssertionError("not used")

    def get_container_mounts(self, container_id):
        return []

    def get_container_processes(self, container_id):
        return []

    def get_container_top(self, container_id):
        with self._lock:
            self.calls += 1
        if self.error is not None:
            raise self.error
        return self.top

    def list_pods(self):
        return []


def _procs():
    return [
        Process(pid=3, cpu_percent=5.0, memory_percent=1.0, read_bytes_per_sec=10, write_bytes_per_sec=0),
        Process(pid=1, cpu_percent=50.0, memory_percent=0.5, read_bytes_per_sec=0, write_bytes_per_sec=1),
        Process(pid=2, cpu_percent=20.0, memory_percent=9.0, read_bytes_per_sec=100, write_bytes_per_sec=100),
    ]


def test_format_rate_below_one_is_zero():
    assert format_rate(0.5) == "0 B/s"
    assert format_rate(0) == "0 B/s"


def test_format_rate_pinned_values():
    assert format_rate(512) == "512 B/s"
    assert format_rate(1024) == "1.0 K/s"
    assert format_rate(2 * 1024**3) == "2.0 G/s"


@pytest.mark.parametrize(
    "value, suffix",
    [(100, " B/s"), (4096, " K/s"), (5 * 1024**2, " M/s"), (3 * 1024**3, " G/s")],
)
def test_format_rate_units(value, suffix):
    assert format_rate(value).endswith(suffix)


def test_sort_by_cpu_descending():
    assert [p.pid for p in sort_processes(_procs(), SortField.CPU)] == [1, 2, 3]


def test_sort_by_mem_descending():
    assert [p.pid for p in sort_processes(_procs(), SortField.MEM)] == [2, 3, 1]


def test_sort_by_pid_ascending():
    assert [p.pid for p in sort_processes(_procs(), SortField.PID)] == [1, 2, 3]


def test_sort_by_io_descending():
    assert [p.pid for p in sort_processes(_procs(), SortField.IO)] == [2, 3, 1]


def test_refresh_without_container_does_not_query():
    runtime = StubRuntime()
    view = TopView(runtime)
    view.refresh()
    assert runtime.calls == 0
    assert view.snapshot() == (None, 0)


def test_refresh_fills_table_sorted_by_cpu():
    runtime = StubRuntime(ProcessTop(processes=_procs()))
    view = TopView(runtime)
    view.set_container("container-1")
    view.refresh()
    assert view.table.data_row_count() == 3
    assert [row[0] for row in view.table.rows] == ["1", "2", "3"]
    assert "[green]3[white]" in view.status_bar.text


def test_long_command_is_cropped():
    process = Process(pid=7, command="/bin/worker", args=["x" * 100])
    view = TopView(StubRuntime(ProcessTop(processes=[process])))
    view.set_container("c")
    view.refresh()
    command = view.table.rows[0][-1]
    assert len(command) == 60
    assert command.endswith("...")
    assert command.startswith("/bin/worker x")


def test_command_joins_args():
    process = Process(pid=7, command="sleep", args=["10"])
    view = TopView(StubRuntime(ProcessTop(processes=[process])))
    view.set_container("c")
    view.refresh()
    assert view.table.rows[0][-1] == "sleep 10"


def test_net_bar_without_data():
    view = TopView(StubRuntime())
    assert view.net_bar.text == " [gray]Network: waiting for data...[-]"
    view.set_container("c")
    view.refresh()
    assert view.net_bar.text == " [gray]Network: no active interfaces[-]"


def test_net_bar_shows_limits_and_interfaces():
    top = ProcessTop(
        network_io=[NetworkStats(interface="eth0", rx_bytes_per_sec=2048)],
        cpu_cores=2.0,
        memory_limit=1024**3,
    )
    view = TopView(StubRuntime(top))
    view.set_container("c")
    view.refresh()
    assert "CPU Limit:" in view.net_bar.text
    assert "Mem Limit:" in view.net_bar.text
    assert "eth0" in view.net_bar.text
    assert format_rate(2048) in view.net_bar.text


def test_handle_input_passes_other_keys():
    view = TopView(StubRuntime())
    event = KeyEvent(Key.RUNE, "x")
    assert view.handle_input(event) is event
    ctrl_c = KeyEvent(Key.CTRL_C)
    assert view.handle_input(ctrl_c) is ctrl_c
    assert view.sort_field is SortField.CPU


def test_set_sort_field_reorders_table():
    view = TopView(StubRuntime(ProcessTop(processes=_procs())))
    view.set_container("c")
    view.refresh()
    view.set_sort_field(SortField.MEM)
    assert [row[0] for row in view.table.rows] == ["2", "3", "1"]


def test_snapshot_is_a_copy():
    view = TopView(StubRuntime(ProcessTop(processes=_procs(), cpu_cores=1.5)))
    view.set_container("c")
    view.refresh()
    snapshot, count = view.snapshot()
    assert count == 3
    assert snapshot.cpu_cores == 1.5
    snapshot.processes.clear()
    assert view.snapshot()[1] == 3


def test_runtime_error_propagates():
    view = TopView(StubRuntime(error=ConnectionError("down")))
    view.set_container("c")
    with pytest.raises(ConnectionError):
        view.refresh()


def test_focus_primitive_is_table():
    view = TopView(StubRuntime())
    assert view.focus_primitive() is view.table


def test_auto_refresh_runs_and_stops():
    runtime = StubRuntime()
    view = TopView(runtime, refresh_interval=0.01)
    view.set_container("c")
    view.start_auto_refresh()
    view.start_auto_refresh()
    assert view.refresh_running is True
    deadline = time.monotonic() + 2
    while runtime.calls < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    view.stop_auto_refresh()
    view.stop_auto_refresh()
    assert runtime.calls >= 2
    assert view.refresh_running is False