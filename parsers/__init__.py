"""
Parsers package for Mailbox Access Toolkit

Provides the CSV codec for shared mailbox permission exports:
- validate_csv / parse_csv: Read the "Identity";"User";"AccessRights" export
- diff_grants / serialize_changes: Produce the Add/Remove changes CSV
"""

from .csv_parser import (
    CSVValidationError,
    FileReadError,
    validate_csv,
    parse_csv,
    diff_grants,
    serialize_changes,
    generate_changes_csv,
    read_csv_file,
    write_changes_csv,
)

__all__ = [
    'CSVValidationError',
    'FileReadError',
    'validate_csv',
    'parse_csv',
    'diff_grants',
    'serialize_changes',
    'generate_changes_csv',
    'read_csv_file',
    'write_changes_csv',
]
