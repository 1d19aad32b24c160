"""Per-item outcome collection for skip-and-continue loops."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
ItemT = TypeVar("ItemT")


@dataclass
class Outcome(Generic[T]):
    """Result of running one item through a fallible async step."""
    item: Any
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def collect_outcomes(
    items: Iterable[ItemT],
    func: Callable[[ItemT], Awaitable[T]],
    expected: Tuple[type, ...] = (Exception,)
) -> List[Outcome[T]]:
    """
    Await func for each item one at a time and record every success or failure.

    Only exceptions matching `expected` are captured; anything else propagates.
    """
    outcomes = []
    for item in items:
        try:
            outcomes.append(Outcome(item=item, value=await func(item)))
        except expected as e:
            outcomes.append(Outcome(item=item, error=e))
    return outcomes


def partition_outcomes(outcomes: List[Outcome[T]]) -> Tuple[List[Outcome[T]], List[Outcome[T]]]:
    """Split outcomes into (successes, failures), preserving order."""
    successes = [outcome for outcome in outcomes if outcome.ok]
    failures = [outcome for outcome in outcomes if not outcome.ok]
    return successes, failures
