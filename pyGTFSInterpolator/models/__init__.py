from .stop_times import StopTimes

__all__ = [
    StopTimes.__name__,
]
