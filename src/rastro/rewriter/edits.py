"""Text edits against an original buffer, applied in one pass.

Every Edit is expressed in offsets of the original, unmodified buffer. The
applier sorts edits by position (stable, so edits at the same offset keep
their planning order) and streams the output append-only, so no edit
invalidates the offsets of another.

Thread Safety:
Edit is frozen. apply_edits() is pure.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from rastro.stringbuilder import StringBuilder
from rastro.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Edit:
    """Replace ``delete_length`` characters at ``position`` with ``insert_text``.

    Attributes:
        position: Offset in the original buffer
        delete_length: Characters removed starting at ``position`` (0 = insert)
        insert_text: Text inserted at ``position``
    """

    position: int
    delete_length: int
    insert_text: str

    @property
    def end(self) -> int:
        return self.position + self.delete_length

    @classmethod
    def insert(cls, position: int, text: str) -> Edit:
        return cls(position, 0, text)

    @classmethod
    def replace(cls, start: int, end: int, text: str) -> Edit:
        return cls(start, end - start, text)


def apply_edits(source: str, edits: Iterable[Edit]) -> tuple[str, tuple[Edit, ...]]:
    """Apply edits computed against ``source``.

    An edit starting inside a region already deleted by an earlier edit is
    dropped.

    Args:
        source: Original buffer
        edits: Edits in original-buffer offsets, any order

    Returns:
        (new_text, applied_edits) with applied edits in application order.

    Example:
        >>> apply_edits("f(a)", [Edit.insert(3, ", b"), Edit.insert(2, "x, ")])[0]
        'f(x, a, b)'
    """
    ordered = sorted(edits, key=lambda edit: edit.position)
    if not ordered:
        return source, ()

    sb = StringBuilder()
    applied: list[Edit] = []
    cursor = 0
    for edit in ordered:
        if edit.position < cursor or edit.end > len(source):
            logger.debug("Dropping overlapping edit at offset %d", edit.position)
            continue
        sb.append(source[cursor : edit.position])
        sb.append(edit.insert_text)
        cursor = edit.end
        applied.append(edit)
    sb.append(source[cursor:])
    return sb.build(), tuple(applied)
