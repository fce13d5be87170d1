from datetime import datetime, timedelta

T0 = datetime(2024, 1, 1, 12, 0, 0)


class FakeClock:
    """Controllable stand-in for utils.clock.utcnow"""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)
