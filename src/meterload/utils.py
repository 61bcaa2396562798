import time


def now() -> float:
    # Wall clock: timestamps are bucketed by epoch second
    return time.time()
