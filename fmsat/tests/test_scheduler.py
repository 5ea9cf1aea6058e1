import threading
import time

from fmsat.core.monitor import Monitor
from fmsat.generator.types import BuilderConfiguration
from fmsat.schedule import BackpressuredScheduler, BuildWorkerPool

def cfg(n, *features):
    return BuilderConfiguration(number=n, features=features)

def test_fifo_hand_out():
    s = BackpressuredScheduler(max_size=10, wait_interval=0.05)
    for i in range(1, 4):
        assert s.add_configuration(cfg(i, f"F{i}"))
    assert [s.get_configuration().number for _ in range(3)] == [1, 2, 3]
    assert s.get_configuration() is None
    assert not s.done

def test_finish_signals_end_of_stream():
    s = BackpressuredScheduler(wait_interval=0.05)
    s.add_configuration(cfg(1))
    s.finish()
    s.finish()
    assert not s.done
    assert s.get_configuration().number == 1
    assert s.done
    assert s.wait_for_configuration(timeout=1.0) is None

def test_wait_for_configuration_times_out():
    s = BackpressuredScheduler(wait_interval=0.05)
    started = time.monotonic()
    assert s.wait_for_configuration(timeout=0.2) is None
    assert time.monotonic() - started >= 0.15

def test_producer_blocks_on_full_buffer():
    s = BackpressuredScheduler(max_size=2, wait_interval=0.05)
    s.add_configuration(cfg(1))
    s.add_configuration(cfg(2))
    added = threading.Event()

    def produce():
        s.add_configuration(cfg(3))
        added.set()

    t = threading.Thread(target=produce)
    t.start()
    assert not added.wait(0.3)
    assert s.get_configuration().number == 1
    assert added.wait(2.0)
    t.join(2.0)
    assert s.progress().buffered == 2

def test_cancel_unblocks_producer():
    s = BackpressuredScheduler(max_size=1, wait_interval=0.05)
    s.add_configuration(cfg(1))
    result = []
    t = threading.Thread(target=lambda: result.append(s.add_configuration(cfg(2))))
    t.start()
    time.sleep(0.1)
    s.cancel()
    t.join(2.0)
    assert result == [False]
    assert s.done
    assert s.get_configuration() is None

def test_external_monitor_cancellation_is_noticed():
    monitor = Monitor()
    s = BackpressuredScheduler(max_size=1, monitor=monitor, wait_interval=0.05)
    s.add_configuration(cfg(1))
    result = []
    t = threading.Thread(target=lambda: result.append(s.add_configuration(cfg(2))))
    t.start()
    monitor.cancel()
    t.join(2.0)
    assert result == [False]

def test_buffer_first_holds_until_sorted():
    s = BackpressuredScheduler(max_size=1, buffer_first=True, wait_interval=0.05)
    for i in range(1, 5):
        assert s.add_configuration(cfg(i))
    assert s.get_configuration() is None
    assert not s.done
    s.sort()
    s.finish()
    assert [s.get_configuration().number for _ in range(4)] == [1, 2, 3, 4]
    assert s.done

def test_leaving_buffer_first_mode_releases_items():
    s = BackpressuredScheduler(buffer_first=True, wait_interval=0.05)
    s.add_configuration(cfg(1))
    assert s.get_configuration() is None
    s.set_buffer_first(False)
    assert s.get_configuration().number == 1

def test_progress_counts():
    s = BackpressuredScheduler(wait_interval=0.05)
    s.add_configuration(cfg(1))
    s.add_configuration(cfg(2))
    s.get_configuration()
    s.mark_built(True)
    s.mark_built(False)
    p = s.progress()
    assert (p.emitted, p.built, p.failed, p.buffered) == (2, 1, 1, 1)
    assert p.completed == 2
    assert not p.finished and not p.cancelled

def test_worker_pool_builds_everything():
    s = BackpressuredScheduler(max_size=3, wait_interval=0.05)
    built = []
    lock = threading.Lock()

    def build(c):
        if c.number == 4:
            raise RuntimeError("compile error")
        with lock:
            built.append(c.number)

    pool = BuildWorkerPool(s, build, workers=3)
    pool.start()
    for i in range(1, 11):
        assert s.add_configuration(cfg(i))
    s.finish()
    pool.join()
    assert sorted(built) == [1, 2, 3, 5, 6, 7, 8, 9, 10]
    p = s.progress()
    assert (p.built, p.failed, p.buffered) == (9, 1, 0)

def test_entering_buffer_first_mode_releases_parked_producer():
    s = BackpressuredScheduler(max_size=1, wait_interval=10.0)
    s.add_configuration(cfg(1))
    added = threading.Event()

    def produce():
        s.add_configuration(cfg(2))
        added.set()

    t = threading.Thread(target=produce)
    t.start()
    assert not added.wait(0.2)
    # the long wait interval means only the mode change notification can wake it
    s.set_buffer_first(True)
    assert added.wait(2.0)
    t.join(2.0)
    assert s.progress().buffered == 2
    assert s.get_configuration() is None
