"""A couple of survivors chosen for mating."""

from __future__ import annotations

from solarga.core.individual import Individual


class Parents:
    """Non-owning pair of individuals.

    Two couples are equal when they hold the same two individuals, in either order.
    """

    __slots__ = ("dad", "mom")

    def __init__(self, dad: Individual, mom: Individual) -> None:
        self.dad = dad
        self.mom = mom

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parents):
            return False
        return (self.dad is other.dad and self.mom is other.mom) or (
            self.dad is other.mom and self.mom is other.dad
        )

    def __hash__(self):
        return hash(frozenset((id(self.dad), id(self.mom))))

    def __repr__(self) -> str:
        return f"Parents(dad={self.dad!r}, mom={self.mom!r})"
