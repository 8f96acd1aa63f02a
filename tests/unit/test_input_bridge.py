"""Tests for the click observer bridge, using a real Python child process."""

import io
import queue
import threading
from unittest.mock import MagicMock

import pytest

from clickable_detail.bridge.input_bridge import InputBridge, start_bridge
from clickable_detail.core.errors import SpawnError

TIMEOUT = 5.0


def drain(bridge, count, timeout=TIMEOUT):
    """Collect ``count`` lines from the bridge queue."""
    return [bridge.events.get(timeout=timeout) for _ in range(count)]


@pytest.fixture
def bridges():
    started = []
    yield started
    for bridge in started:
        bridge.stop()


# ── Spawning ────────────────────────────────────────────────────────────

class TestSpawn:
    def test_missing_program_raises_spawn_error(self):
        bridge = InputBridge("/nonexistent/click-observer")
        with pytest.raises(SpawnError):
            bridge.start()
        assert not bridge.is_running

    def test_command(self):
        bridge = InputBridge("osascript", ["/tmp/x.scpt", "-l", "JavaScript", 3])
        assert bridge.command == ["osascript", "/tmp/x.scpt", "-l", "JavaScript", "3"]

    def test_start_is_idempotent(self, python_observer, bridges):
        argv = python_observer("import time; time.sleep(30)")
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        pid = bridge._process.pid
        bridge.start()
        assert bridge._process.pid == pid
        assert bridge.is_running


# ── Output framing ──────────────────────────────────────────────────────

class TestOutput:
    def test_lines_in_order(self, python_observer, bridges):
        argv = python_observer("""
            print("10,20")
            print("30,40")
            print("50,60")
        """)
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        assert drain(bridge, 3) == ["10,20", "30,40", "50,60"]

    def test_line_split_across_writes(self, python_observer, bridges):
        argv = python_observer("""
            import sys, time
            sys.stdout.write("12")
            sys.stdout.flush()
            time.sleep(0.2)
            sys.stdout.write("3,45\\n67,")
            sys.stdout.flush()
            time.sleep(0.2)
            sys.stdout.write("89\\n")
            sys.stdout.flush()
        """)
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        assert drain(bridge, 2) == ["123,45", "67,89"]

    def test_crlf_and_blank_lines(self, python_observer, bridges):
        argv = python_observer("""
            import sys
            sys.stdout.write("1,2\\r\\n\\n3,4\\n")
        """)
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        assert drain(bridge, 2) == ["1,2", "3,4"]

    def test_trailing_partial_line_flushed_at_exit(self, python_observer, bridges):
        argv = python_observer("""
            import sys
            sys.stdout.write("5,6")
        """)
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        assert drain(bridge, 1) == ["5,6"]

    def test_exit_callback(self, python_observer, bridges):
        exited = threading.Event()
        codes = []

        def on_exit(code):
            codes.append(code)
            exited.set()

        argv = python_observer("print('bye')")
        bridge = InputBridge(argv[0], argv[1:], on_exit=on_exit).start()
        bridges.append(bridge)
        assert exited.wait(TIMEOUT)
        assert drain(bridge, 1) == ["bye"]

    def test_iter_events_without_timeout_drains_queue(self):
        bridge = InputBridge("unused")
        bridge.events.put("1,1")
        bridge.events.put("2,2")
        assert list(bridge.iter_events()) == ["1,1", "2,2"]
        assert list(bridge.iter_events()) == []


# ── Stderr and stdin ────────────────────────────────────────────────────

class TestChannels:
    def test_stderr_goes_to_callback(self, python_observer, bridges):
        received = queue.Queue()
        argv = python_observer("""
            import sys
            sys.stderr.write("permission denied\\n")
        """)
        bridge = InputBridge(argv[0], argv[1:], on_stderr=received.put).start()
        bridges.append(bridge)
        text = received.get(timeout=TIMEOUT)
        assert "permission denied" in text
        assert bridge.events.empty()

    def test_send_reaches_stdin(self, python_observer, bridges):
        argv = python_observer("""
            import sys
            for line in sys.stdin:
                print("echo:" + line.strip())
        """)
        bridge = start_bridge(argv[0], argv[1:])
        bridges.append(bridge)
        bridge.send("ping")
        bridge.send("")
        bridge.send("pong")
        assert drain(bridge, 2) == ["echo:ping", "echo:pong"]

    def test_send_after_stop_is_ignored(self, python_observer):
        argv = python_observer("import time; time.sleep(30)")
        bridge = start_bridge(argv[0], argv[1:])
        bridge.stop()
        bridge.send("late")
        assert not bridge.is_running

    def test_stop_terminates_process(self, python_observer):
        argv = python_observer("import time; time.sleep(30)")
        bridge = start_bridge(argv[0], argv[1:])
        process = bridge._process
        bridge.stop()
        assert process.poll() is not None
        assert bridge.returncode is None

    def test_lines_go_to_callback_instead_of_queue(self, python_observer, bridges):
        received = queue.Queue()
        argv = python_observer("""
            print("1,2")
            print("3,4")
        """)
        bridge = InputBridge(argv[0], argv[1:], on_line=received.put).start()
        bridges.append(bridge)
        assert [received.get(timeout=TIMEOUT) for _ in range(2)] == ["1,2", "3,4"]
        assert bridge.events.empty()

    def test_failing_line_callback_keeps_reading(self):
        seen = []

        def on_line(line):
            seen.append(line)
            raise RuntimeError("boom")

        bridge = InputBridge("unused", on_line=on_line)
        bridge._read_stdout(io.BytesIO(b"1,2\n3,4\n"))
        assert seen == ["1,2", "3,4"]


# ── Restarts ────────────────────────────────────────────────────────────

class TestStaleReader:
    def test_old_reader_leaves_new_process_running(self):
        bridge = InputBridge("unused")
        bridge._process = MagicMock()
        bridge._running = True
        bridge._read_stdout(io.BytesIO(b"1,2\n"), MagicMock())
        assert bridge.is_running
        assert bridge.events.get_nowait() == "1,2"

    def test_current_reader_clears_running(self):
        bridge = InputBridge("unused")
        process = MagicMock()
        process.poll.return_value = 0
        bridge._process = process
        bridge._running = True
        bridge._read_stdout(io.BytesIO(b""), process)
        assert not bridge.is_running
