"""Tests for note read/write authorization."""

from dataclasses import replace

import pytest

from blocknotes.core.notes.access import can_read, can_write, require_read, require_write
from blocknotes.errors import PermissionDenied
from blocknotes.models.note import Note


def test_owner_can_read_and_write(sample_note: Note) -> None:
    assert can_read("u1", sample_note)
    assert can_write("u1", sample_note)


def test_stranger_cannot_touch_private_note(sample_note: Note) -> None:
    assert not can_read("u2", sample_note)
    assert not can_write("u2", sample_note)
    with pytest.raises(PermissionDenied):
        require_read("u2", sample_note)


def test_public_note_is_readable_but_not_writable(sample_note: Note) -> None:
    public = replace(sample_note, is_public=True)
    assert can_read("u2", public)
    require_read("u2", public)
    with pytest.raises(PermissionDenied):
        require_write("u2", public)
