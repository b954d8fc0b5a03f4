from svcutils.labeled.timer import MultiTimer


class FakeTimer:
    def __init__(self):
        self.stop_count = 0

    def stop(self):
        self.stop_count += 1
        return float(self.stop_count)


def test_stop_stops_every_timer():
    fake = FakeTimer()
    timer = MultiTimer([fake, fake, fake])
    timer.stop()
    assert fake.stop_count == 3


def test_stop_returns_last_value():
    first, second = FakeTimer(), FakeTimer()
    second.stop_count = 10
    assert MultiTimer([first, second]).stop() == 11.0
    assert first.stop_count == 1


def test_empty_multitimer_returns_zero():
    assert MultiTimer([]).stop() == 0.0


def test_context_manager_stops():
    fake = FakeTimer()
    with MultiTimer([fake, fake]):
        pass
    assert fake.stop_count == 2