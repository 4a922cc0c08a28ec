"""
Managers package for Mailbox Access Toolkit

Provides the AccessStore, which owns the original/current grant snapshots
and enforces the edit rules (email shape, duplicate grants, mailbox quota).
"""

from .access_store import AccessStore, MAX_MAILBOXES_PER_USER, is_valid_email

__all__ = ['AccessStore', 'MAX_MAILBOXES_PER_USER', 'is_valid_email']
