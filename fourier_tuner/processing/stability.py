"""Debounce a stream of note readings before showing them."""

from typing import Optional

from ..core import NoteMatch
from ..core.constants import NOTE_STABILITY_THRESHOLD


class StabilityFilter:
    """Report a note only after it has repeated in consecutive cycles.

    The first sighting of a note starts a run at count 0 and each identical
    cycle after it adds one; a cycle with no note clears the run.
    """

    def __init__(self, required: int = NOTE_STABILITY_THRESHOLD):
        if required < 1:
            raise ValueError(f"required must be at least 1, got {required}")
        self.required = required
        self.current: Optional[str] = None
        self.count = 0

    def update(self, note: Optional[NoteMatch]) -> bool:
        """
        Feed one cycle's note.

        Args:
            note: Note seen this cycle, or None

        Returns:
            True once the same note name has repeated ``required`` times
            after its first sighting
        """
        if note is None:
            self.reset()
            return False

        if note.note_name == self.current:
            self.count += 1
        else:
            self.current = note.note_name
            self.count = 0
        return self.count >= self.required

    @property
    def stable(self) -> bool:
        return self.current is not None and self.count >= self.required

    def reset(self) -> None:
        self.current = None
        self.count = 0
