"""Error taxonomy for the occupancy engine."""


class OccupyError(Exception):
    """Base class for occupancy errors."""
    pass


class SamplingError(OccupyError):
    """A resource sampler could not produce a reading."""
    pass


class AllocationError(OccupyError):
    """Memory grow failed part-way through.

    Chunks allocated before the failure stay in the pool.
    """

    def __init__(self, requested: int, allocated: int):
        self.requested = requested
        self.allocated = allocated
        super().__init__(
            f"Allocation failed after {allocated} of {requested} bytes"
        )


class PaddingIOError(OccupyError):
    """The padding working directory could not be prepared."""
    pass


class ShutdownTimeoutError(OccupyError):
    """Workers did not exit within their bounded wait."""

    def __init__(self, stragglers: int, timeout_seconds: float):
        self.stragglers = stragglers
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"{stragglers} worker(s) still alive after {timeout_seconds:.1f}s"
        )
