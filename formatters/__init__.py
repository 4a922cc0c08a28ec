"""
Formatters package for Mailbox Access Toolkit

Provides output formatters:
- render_mailboxes: Text table of mailboxes and users, filtered by identity
- AccessExcelFormatter: Review workbook with current access and pending changes
"""

from .mailbox_table_formatter import render_mailboxes, filter_identities
from .access_excel_formatter import AccessExcelFormatter

__all__ = ['render_mailboxes', 'filter_identities', 'AccessExcelFormatter']
