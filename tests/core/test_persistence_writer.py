import logging
import threading

from camswitch.core.persistence.writer import BackgroundWriter


def test_writes_run_in_order_on_one_thread():
    writer = BackgroundWriter()
    seen = []
    threads = set()

    def write(value):
        seen.append(value)
        threads.add(threading.current_thread().name)

    for i in range(20):
        writer.submit(write, i)
    writer.flush()
    writer.close()

    assert seen == list(range(20))
    assert len(threads) == 1
    assert threads.pop().startswith("persistence")


def test_failed_write_is_logged_not_raised(caplog):
    writer = BackgroundWriter()
    after = []

    def broken():
        raise RuntimeError("disk full")

    with caplog.at_level(logging.ERROR, logger="camswitch.core.persistence.writer"):
        writer.submit(broken, description="broken write")
        writer.submit(after.append, "next")
        writer.flush()
    writer.close()

    # 1. Later writes still run
    assert after == ["next"]
    # 2. The failure was logged with its description
    assert any("broken write" in r.getMessage() for r in caplog.records)


def test_submit_after_close_is_dropped():
    writer = BackgroundWriter()
    writer.close()
    calls = []

    writer.submit(calls.append, 1)

    assert calls == []
