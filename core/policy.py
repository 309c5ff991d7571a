"""
Outcome policies for simulated processing.

A policy decides how long a unit of simulated work takes and whether it
ends in failure. The simulator only talks to this interface so tests can
swap in deterministic policies.
"""
import random
from dataclasses import dataclass, field
from typing import Optional, Protocol


class OutcomePolicy(Protocol):
    """Decides delay and outcome of one simulated completion."""

    def draw_delay(self) -> float:
        ...

    def should_fail(self) -> bool:
        ...


@dataclass
class RandomOutcomePolicy:
    """
    Uniform integer delay in ``[min_delay, max_delay]`` seconds (inclusive)
    and a Bernoulli failure draw with probability ``failure_rate``.
    """

    min_delay: int
    max_delay: int
    failure_rate: float
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if self.min_delay > self.max_delay:
            raise ValueError("min_delay must not exceed max_delay")
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")

    def draw_delay(self) -> float:
        return float(self.rng.randint(self.min_delay, self.max_delay))

    def should_fail(self) -> bool:
        return self.rng.random() < self.failure_rate


@dataclass
class FixedOutcomePolicy:
    """Always the same delay and outcome."""

    delay: float = 0.0
    fail: bool = False

    def draw_delay(self) -> float:
        return self.delay

    def should_fail(self) -> bool:
        return self.fail


def device_policy(
    min_delay: int = 1,
    max_delay: int = 5,
    failure_rate: float = 0.10,
    rng: Optional[random.Random] = None,
) -> RandomOutcomePolicy:
    """Devices: 1-5 s, 10 % failures."""
    return RandomOutcomePolicy(min_delay, max_delay, failure_rate, rng or random.Random())


def order_policy(
    min_delay: int = 2,
    max_delay: int = 8,
    failure_rate: float = 0.05,
    rng: Optional[random.Random] = None,
) -> RandomOutcomePolicy:
    """Payment orders: 2-8 s, 5 % failures."""
    return RandomOutcomePolicy(min_delay, max_delay, failure_rate, rng or random.Random())
