"""
Mailbox Table Formatter - Render mailbox grants as a text table

PURPOSE: Show who has FullAccess to which shared mailbox in the terminal

AVIATION ANALOGY: Like the gate display - one line per flight (mailbox),
with everyone checked in listed underneath
"""

from typing import Dict, List, Set, Tuple


def filter_identities(grants: Dict[str, Set[str]], filter_text: str = '') -> List[str]:
    """
    Sorted identities whose name contains filter_text (case-insensitive).

    Only the identity is searched, not the users.
    """
    needle = (filter_text or '').lower()
    return [
        identity for identity in sorted(grants)
        if not needle or needle in identity.lower()
    ]


def mailbox_rows(grants: Dict[str, Set[str]], filter_text: str = '') -> List[Tuple[str, List[str]]]:
    """(identity, sorted users) pairs for the identities that pass the filter."""
    return [
        (identity, sorted(grants[identity]))
        for identity in filter_identities(grants, filter_text)
    ]


def render_mailboxes(
    grants: Dict[str, Set[str]],
    filter_text: str = '',
    width: int = 60
) -> str:
    """
    Render grants as text, one block per shared mailbox.

    EXAMPLE:
        sales@contoso.com (2 users)
          • amy@contoso.com
          • jane@contoso.com
    """
    rows = mailbox_rows(grants, filter_text)
    if not rows:
        if filter_text:
            return f"No shared mailboxes match '{filter_text}'."
        return "No shared mailboxes loaded."

    lines = []
    for identity, users in rows:
        noun = "user" if len(users) == 1 else "users"
        lines.append(f"{identity} ({len(users)} {noun})")
        for user in users:
            lines.append(f"  • {user}")
    lines.append("-" * width)
    lines.append(f"{len(rows)} of {len(grants)} shared mailboxes shown")
    return "\n".join(lines)
