"""
ACCESS STORE MODULE
===================
Holds the shared mailbox grants for one editing session.

Two snapshots are kept side by side:
- original: exactly what the export said, never touched after load
- current:  the working copy the operator edits

The changes file is just the difference between the two, so the store never
has to remember individual add/remove actions. Adding then removing the same
user cancels out on its own.

Business rules enforced on add:
- The user must look like an email address
- A user can't be granted the same mailbox twice
- A user can hold FullAccess to at most MAX_MAILBOXES_PER_USER mailboxes

Mutations don't raise for rule violations. They return a result dict that the
CLI (or any other front end) turns into a message and a re-render.

Aviation Analogy:
    Like a crew roster with a duty-time limit. Scheduling can swap crew in
    and out freely, but nobody can be rostered past their limit, and the
    published roster (original) stays on file until the new one is issued.
"""

from typing import Optional, Dict, List, Set, Any
import re

from parsers.csv_parser import diff_grants


MAX_MAILBOXES_PER_USER = 7
DEFAULT_SUGGESTION_LIMIT = 4

# Result status values
STATUS_ADDED = 'added'
STATUS_REMOVED = 'removed'
STATUS_INVALID_EMAIL = 'invalid_email'
STATUS_ALREADY_GRANTED = 'already_granted'
STATUS_QUOTA_EXCEEDED = 'quota_exceeded'

# local@domain.tld - no whitespace, exactly one @, at least one dot after it
EMAIL_PATTERN = re.compile(r'[^\s@]+@[^\s@]+\.[^\s@]+')


def is_valid_email(email: str) -> bool:
    """Check that a user looks like local@domain.tld."""
    return bool(EMAIL_PATTERN.fullmatch(email or ''))


def copy_grants(grants: Dict[str, Set[str]]) -> Dict[str, Set[str]]:
    """Copy a grants map with fresh sets so the two never share state."""
    return {identity: set(users) for identity, users in grants.items()}


class AccessStore:
    """
    PURPOSE: Own the original/current grant snapshots and the edit rules

    ATTRIBUTES:
        original: Dict[str, Set[str]] as loaded, read-only by convention
        current: Dict[str, Set[str]] working copy
        max_mailboxes_per_user: Quota checked on every add

    INVARIANTS:
        - Every identity in current maps to a non-empty set
        - original and current never share a set object

    EXAMPLE:
        store = AccessStore()
        store.load(parse_csv(text))

        result = store.add_grant("sales@contoso.com", "jane@contoso.com")
        if not result['success']:
            print(result['message'])

        changes = store.pending_changes()   # None if nothing changed
    """

    def __init__(self, max_mailboxes_per_user: int = MAX_MAILBOXES_PER_USER):
        self.max_mailboxes_per_user = max_mailboxes_per_user
        self.original: Dict[str, Set[str]] = {}
        self.current: Dict[str, Set[str]] = {}

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self, grants: Dict[str, Set[str]]) -> None:
        """
        Replace both snapshots with freshly loaded grants.

        Both copies are built before either attribute is assigned, so a
        caller never sees one snapshot from the old load and one from the new.
        Identities with no users are not carried over.
        """
        original = {
            identity: set(users)
            for identity, users in grants.items()
            if users
        }
        current = copy_grants(original)

        self.original = original
        self.current = current

    def clear(self) -> None:
        """Reset to the empty state (used when a load fails)."""
        self.load({})

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_users(self) -> List[str]:
        """All users with FullAccess to any mailbox, sorted and de-duplicated."""
        all_users = set()
        for users in self.current.values():
            all_users.update(users)
        return sorted(all_users)

    def mailboxes_for(self, user: str) -> List[str]:
        """Sorted identities the user currently has FullAccess to."""
        return sorted(
            identity
            for identity, users in self.current.items()
            if user in users
        )

    def has_max_mailboxes(self, user: str) -> bool:
        """True if the user is already at (or over) the mailbox quota."""
        return len(self.mailboxes_for(user)) >= self.max_mailboxes_per_user

    def suggest_users(self, text: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[str]:
        """
        Suggest known users while an email is being typed.

        PARAMETERS:
            text: What's been typed so far
            limit: Maximum suggestions to return

        RETURNS:
            Users containing the text (case-insensitive), excluding an exact
            match since there's nothing left to complete.
        """
        if not text:
            return []

        needle = text.lower()
        matches = [
            user for user in self.list_users()
            if needle in user.lower() and user.lower() != needle
        ]
        return matches[:limit]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_grant(self, identity: str, user: str) -> Dict[str, Any]:
        """
        Give a user FullAccess to a shared mailbox.

        PURPOSE: Add one grant to the working copy, subject to the rules

        PARAMETERS:
            identity: Shared mailbox identity
            user: User email

        RETURNS:
            dict: Result with 'success', 'status', 'severity', 'message'.
            On quota failure 'mailboxes' lists the user's current mailboxes.

        CHECK ORDER:
            1. Email shape       -> invalid_email (error)
            2. Already on it     -> already_granted (warning, no-op)
            3. Quota reached     -> quota_exceeded (error)
        """
        if not is_valid_email(user):
            return self._result(
                False, STATUS_INVALID_EMAIL, 'error', identity, user,
                f'"{user}" is not a valid email address.'
            )

        if user in self.current.get(identity, set()):
            return self._result(
                False, STATUS_ALREADY_GRANTED, 'warning', identity, user,
                f'User "{user}" already has FullAccess to "{identity}".'
            )

        user_mailboxes = self.mailboxes_for(user)
        if len(user_mailboxes) >= self.max_mailboxes_per_user:
            mailbox_list = '\n'.join(f"• {mailbox}" for mailbox in user_mailboxes)
            return self._result(
                False, STATUS_QUOTA_EXCEEDED, 'error', identity, user,
                f'Cannot add user "{user}" to another shared mailbox. '
                f'User already has access to {len(user_mailboxes)} shared mailboxes '
                f'(maximum is {self.max_mailboxes_per_user}).\n\n'
                f'Current mailboxes:\n{mailbox_list}',
                mailboxes=user_mailboxes
            )

        self.current.setdefault(identity, set()).add(user)
        return self._result(
            True, STATUS_ADDED, 'success', identity, user,
            f'User "{user}" successfully added to "{identity}".'
        )

    def remove_grant(self, identity: str, user: str) -> Dict[str, Any]:
        """
        Take a user's FullAccess away from a shared mailbox.

        Always reports success. Removing from an unknown mailbox, or removing
        a user who isn't on it, leaves current as it was. A mailbox whose
        last user is removed drops out of current entirely.
        """
        users = self.current.get(identity)
        if users is None:
            return self._result(
                True, STATUS_REMOVED, 'info', identity, user,
                f'Shared mailbox "{identity}" not found; nothing to remove.',
                changed=False
            )

        changed = user in users
        users.discard(user)
        if not users:
            del self.current[identity]

        return self._result(
            True, STATUS_REMOVED, 'success', identity, user,
            f'User "{user}" removed from "{identity}".',
            changed=changed
        )

    # =========================================================================
    # CHANGES
    # =========================================================================

    def pending_changes(self) -> Optional[List[Dict[str, str]]]:
        """Change records turning original into current, or None if unchanged."""
        return diff_grants(self.original, self.current)

    def _result(
        self,
        success: bool,
        status: str,
        severity: str,
        identity: str,
        user: str,
        message: str,
        mailboxes: List[str] = None,
        changed: bool = None
    ) -> Dict[str, Any]:
        if changed is None:
            changed = success
        return {
            'success': success,
            'status': status,
            'severity': severity,
            'identity': identity,
            'user': user,
            'message': message,
            'mailboxes': mailboxes or [],
            'changed': changed
        }
