"""Canonical forms of the identity fields.

The same functions run on write and on every lookup so that case variants
of one identity always collide.
"""


def normalize_email(raw: str) -> str:
    """Lower-case and trim an LDAP e-mail."""
    return raw.strip().lower()


def normalize_roll_number(raw: str) -> str:
    """Upper-case and trim a roll number."""
    return raw.strip().upper()


def format_name(name: str) -> str:
    """Capitalise each word: ``"aLICE  smith"`` -> ``"Alice Smith"``."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())
