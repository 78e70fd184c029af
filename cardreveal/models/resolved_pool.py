"""
Resolved Pool Model.

The reconciled sequence a reveal spins through.

INVARIANTS:
- entries are deduplicated by id
- entries[awarded_index].id == awarded card id (established once, at build)
- entries is never empty
"""

from dataclasses import dataclass

from cardreveal.models.card_design import CardDesign


@dataclass(frozen=True, slots=True)
class ResolvedPool:
    """
    Output of pool resolution.

    Attributes:
        entries: Ordered, deduplicated card designs
        awarded_index: Position of the awarded design within entries
        fail_closed: True when resolution fell back to the awarded design alone
    """

    entries: tuple[CardDesign, ...]
    awarded_index: int
    fail_closed: bool = False

    @property
    def awarded_card(self) -> CardDesign:
        return self.entries[self.awarded_index]

    @property
    def is_single(self) -> bool:
        """True when there is nothing to spin through."""
        return len(self.entries) == 1

    def __len__(self) -> int:
        return len(self.entries)
