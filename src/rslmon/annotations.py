"""Annotation overlay: free-text notes keyed by (link, period).

Notes live independently of readings. A note may exist for a month without
any reading, and removing a reading never removes its month's note.

Stores assume a single writer. Sharing notes between concurrent editors
would need last-writer-wins with server timestamps or a version column.
"""

from typing import Iterable, Optional, Protocol

from .models import Note, PeriodKey

NoteIndex = dict[tuple[int, PeriodKey], str]


class AnnotationStore(Protocol):
    """Storage contract for notes."""

    def get_note(self, link_id: int, period: PeriodKey) -> Optional[str]:
        ...

    def set_note(self, link_id: int, period: PeriodKey, text: str) -> None:
        ...

    def notes_for_year(self, year: int) -> NoteIndex:
        ...


def normalize_note(text: Optional[str]) -> Optional[str]:
    """Strip a note; blank notes become None."""
    if text is None:
        return None
    text = text.strip()
    return text or None


class InMemoryAnnotationStore:
    """Session-local note store. Notes do not survive the process."""

    def __init__(self, notes: Optional[Iterable[Note]] = None):
        self._notes: NoteIndex = {}
        for note in notes or []:
            self.set_note(note.link_id, note.period, note.text)

    def get_note(self, link_id: int, period: PeriodKey) -> Optional[str]:
        return self._notes.get((link_id, PeriodKey(*period)))

    def set_note(self, link_id: int, period: PeriodKey, text: str) -> None:
        """Set or replace a note. Blank text removes the note."""
        key = (link_id, PeriodKey(*period))
        text = normalize_note(text)
        if text is None:
            self._notes.pop(key, None)
        else:
            self._notes[key] = text

    def notes_for_year(self, year: int) -> NoteIndex:
        return {key: text for key, text in self._notes.items() if key[1].year == year}

    def __len__(self) -> int:
        return len(self._notes)


def index_notes(notes: Optional[Iterable[Note]]) -> NoteIndex:
    """Build a (link_id, period) -> text lookup from Note records.

    Later notes for the same key replace earlier ones; blank notes are
    dropped.
    """
    index: NoteIndex = {}
    for note in notes or []:
        text = normalize_note(note.text)
        if text is not None:
            index[(note.link_id, PeriodKey(*note.period))] = text
    return index
