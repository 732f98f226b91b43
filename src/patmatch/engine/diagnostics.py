"""
Furthest-failure diagnostics.

Every failed primitive attempt registers the position it failed at and a
label describing what it expected there. Only the furthest position is
kept; labels registered at that position are de-duplicated and keep their
first-registration order.
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Failure:
    """Furthest failure position and what was expected there."""
    position: int
    expected: Tuple[str, ...]


class Diagnostics:
    """Running furthest-failure accumulator for one top-level call."""
    __slots__ = ('position', '_labels', '_seen')

    def __init__(self):
        self.position = -1
        self._labels: List[str] = []
        self._seen = set()

    def expected(self, position: int, label: str) -> None:
        if position > self.position:
            self.position = position
            self._labels = [label]
            self._seen = {label}
        elif position == self.position and label not in self._seen:
            self._labels.append(label)
            self._seen.add(label)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(self._labels)

    def has_failure(self) -> bool:
        return self.position >= 0

    def failure(self) -> Failure:
        return Failure(max(self.position, 0), self.labels)
