"""Verification Test: process churn resilience.

Processes are started and terminated while the monitor samples the real
process table. Processes exiting mid-enumeration must be dropped from the
snapshot, never crash the sampling thread.
"""

import multiprocessing
import random
import time

from hostmon.monitor import SystemMonitor
from hostmon.sampler import Sampler
from hostmon.store import SnapshotStore


def dummy_worker(duration: float = 60.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


def burn_worker(duration: float = 10.0) -> None:
    """A dummy worker that keeps one core busy."""
    deadline = time.monotonic() + duration
    while time.monotonic() < deadline:
        pass


class TestChaosMonkey:
    """Chaos Monkey verification suite tests."""

    def test_monitor_survives_process_termination(self):
        """Test the monitor keeps publishing while processes die mid-poll."""
        processes = []
        for _ in range(30):
            p = multiprocessing.Process(target=dummy_worker, args=(60.0,))
            p.start()
            processes.append(p)

        monitor = SystemMonitor(Sampler(), SnapshotStore(), poll_rate=0.2)

        try:
            monitor.start()
            assert monitor.store.wait(timeout=10.0) is not None

            for p in random.sample(processes, 15):
                if p.is_alive():
                    p.terminate()
                time.sleep(0.05)

            published_before = monitor.store.published_count
            deadline = time.monotonic() + 10.0
            while monitor.store.published_count < published_before + 3:
                assert time.monotonic() < deadline, "Monitor stopped publishing"
                time.sleep(0.1)

            snapshot = monitor.store.read()
            assert len(snapshot.processes) <= 20
            assert monitor.is_running, "Monitor should still be running after chaos"
        finally:
            monitor.stop()
            for p in processes:
                if p.is_alive():
                    p.terminate()
            for p in processes:
                p.join(timeout=1.0)

    def test_many_processes_truncated_and_ranked(self):
        """Test a crowded process table is cut to the 20 busiest entries."""
        processes = []
        for _ in range(40):
            p = multiprocessing.Process(target=dummy_worker, args=(30.0,))
            p.start()
            processes.append(p)
        busy = multiprocessing.Process(target=burn_worker, args=(10.0,))
        busy.start()
        processes.append(busy)

        sampler = Sampler()
        try:
            # Per-process CPU percent needs two readings
            sampler.collect()
            time.sleep(0.5)
            snapshot = sampler.collect()

            assert len(snapshot.processes) == 20
            cpus = [p.cpu_percent for p in snapshot.processes]
            assert cpus == sorted(cpus, reverse=True)
            assert busy.pid in {p.pid for p in snapshot.processes}
        finally:
            for p in processes:
                if p.is_alive():
                    p.terminate()
            for p in processes:
                p.join(timeout=1.0)
