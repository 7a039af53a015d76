"""Identity generation for notes and blocks."""

import secrets
import uuid


def new_note_id() -> str:
    return uuid.uuid4().hex


def new_block_id() -> str:
    # 12 hex chars; uniqueness only has to hold within one document
    return f"b-{secrets.token_hex(6)}"
