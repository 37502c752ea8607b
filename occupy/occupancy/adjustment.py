"""Hysteresis-based adjustment decisions.

Pure functions: each takes the sampled and target utilization of one
resource and returns what the matching pool should do. No state is kept
between calls.
"""

import math
from dataclasses import dataclass
from enum import Enum

# Hysteresis bands (percentage points)
MEMORY_BAND = 2.0
CPU_BAND = 5.0
DISK_BAND = 5.0

# Memory release policy: (max excess points, fraction of held bytes)
RELEASE_STEPS = (
    (5.0, 0.3),
    (10.0, 0.5),
)
RELEASE_MAX_FRACTION = 0.7


class Action(Enum):
    """What a pool should do this tick."""
    GROW = "grow"
    SHRINK = "shrink"
    NOOP = "noop"


@dataclass(frozen=True)
class Decision:
    """Action plus magnitude.

    amount is bytes for memory and disk, and the desired worker count for
    CPU. A disk SHRINK always removes every padding file.
    """
    action: Action
    amount: int = 0

    @classmethod
    def noop(cls) -> "Decision":
        return cls(Action.NOOP)


def classify(current: float, target: float, band: float) -> Action:
    """Place current relative to the band around target."""
    if current < target - band:
        return Action.GROW
    if current > target + band:
        return Action.SHRINK
    return Action.NOOP


def release_fraction(excess: float) -> float:
    """Fraction of held memory to release for a given overshoot."""
    for limit, fraction in RELEASE_STEPS:
        if excess <= limit:
            return fraction
    return RELEASE_MAX_FRACTION


def _missing_bytes(current: float, target: float, total_bytes: int) -> int:
    return max(1, math.ceil((target - current) / 100.0 * total_bytes))


def decide_memory(
    current: float,
    target: float,
    total_bytes: int,
    held_bytes: int,
    band: float = MEMORY_BAND
) -> Decision:
    """Grow by the missing share of total memory, or release part of what is held."""
    action = classify(current, target, band)

    if action is Action.GROW:
        return Decision(Action.GROW, _missing_bytes(current, target, total_bytes))

    if action is Action.SHRINK:
        fraction = release_fraction(current - target)
        return Decision(Action.SHRINK, math.ceil(held_bytes * fraction))

    return Decision.noop()


def decide_cpu(
    current: float,
    target: float,
    core_count: int,
    band: float = CPU_BAND
) -> Decision:
    """Pick a spinner count proportional to the target, or zero on overshoot."""
    action = classify(current, target, band)

    if action is Action.GROW:
        cores = max(1, core_count)
        workers = int(target / 100.0 * cores)
        return Decision(Action.GROW, min(max(workers, 1), cores))

    if action is Action.SHRINK:
        return Decision(Action.SHRINK, 0)

    return Decision.noop()


def decide_disk(
    current: float,
    target: float,
    total_bytes: int,
    band: float = DISK_BAND
) -> Decision:
    """Pad by the missing share of the filesystem, or drop all padding."""
    action = classify(current, target, band)

    if action is Action.GROW:
        return Decision(Action.GROW, _missing_bytes(current, target, total_bytes))

    if action is Action.SHRINK:
        return Decision(Action.SHRINK, 0)

    return Decision.noop()
