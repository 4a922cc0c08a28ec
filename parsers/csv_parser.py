"""
CSV PARSER MODULE
=================
Reads the shared mailbox permission export and writes the changes file.

The export comes out of Exchange as a semicolon-delimited, double-quoted CSV:

    "Identity";"User";"AccessRights"
    "sales@contoso.com";"jane@contoso.com";"FullAccess"

Only FullAccess rows matter. Everything else (ReadPermission, SendAs, ...) is
dropped on import.

The changes file has one extra column saying what to do with each grant:

    "Identity";"User";"AccessRights";"Action"
    "sales@contoso.com";"jane@contoso.com";"FullAccess";"Remove"

Aviation Analogy:
    Think of this like the load sheet for a flight. The original load sheet is
    what was planned, the current one is what's actually on board, and the
    changes file is the last-minute change (LMC) slip: only the differences,
    so the ground crew doesn't redo the whole load.

Data Shapes:
    MailboxGrants: Dict[str, Set[str]]  - identity -> users with FullAccess
    ChangeRecord:  dict with identity, user, access_rights, action
"""

from typing import Optional, Dict, List, Set, Any
from pathlib import Path
import re


# =============================================================================
# CONSTANTS
# =============================================================================

FULL_ACCESS = 'FullAccess'
ACTION_ADD = 'Add'
ACTION_REMOVE = 'Remove'

CHANGES_HEADER = '"Identity";"User";"AccessRights";"Action"'
CHANGES_FILENAME = 'mailbox_changes.csv'

# A field is a run of unquoted text and/or complete "quoted" chunks.
# Semicolons inside quotes don't split the field.
FIELD_PATTERN = re.compile(r'(?:[^;"]+|"[^"]*")+')


# =============================================================================
# ERRORS
# =============================================================================

class CSVValidationError(ValueError):
    """
    The CSV can't be loaded at all (empty, or no usable data rows).

    Carries the full validate_csv() result so callers can show every error.
    """

    def __init__(self, validation: Dict[str, Any]):
        self.errors = list(validation.get('errors', []))
        self.warnings = list(validation.get('warnings', []))
        super().__init__("CSV validation failed:\n" + "\n".join(self.errors))


class FileReadError(OSError):
    """The export file couldn't be read (missing, unreadable, bad encoding)."""


# =============================================================================
# TOKENIZING
# =============================================================================

def split_fields(line: str) -> List[str]:
    """
    Split one CSV line into raw fields, respecting double quotes.

    Quotes are kept on the returned fields; see clean_field().

    EXAMPLE:
        split_fields('"a;b";"c";"FullAccess"')
        # ['"a;b"', '"c"', '"FullAccess"']
    """
    return FIELD_PATTERN.findall(line)


def clean_field(field: str) -> str:
    """Remove the double quotes around (and within) a field."""
    return field.replace('"', '')


def _split_lines(csv_text: str) -> List[str]:
    return csv_text.strip().split('\n')


# =============================================================================
# VALIDATION
# =============================================================================

def validate_csv(csv_text: str) -> Dict[str, Any]:
    """
    Check the export before parsing it.

    PURPOSE: Catch empty files and files with no usable rows up front

    PARAMETERS:
        csv_text: Raw file contents

    RETURNS:
        dict: {
            'is_valid': bool,
            'errors': List[str],    - reasons the file can't be loaded
            'warnings': List[str]   - problems that don't block the load
        }

    RULES:
        - Empty file -> invalid
        - Header missing "identity", "user" or "access" -> warning only
        - Data line with fewer than 3 fields -> warning for that line
        - No data line with 3+ fields -> invalid
    """
    result = {
        'is_valid': True,
        'errors': [],
        'warnings': []
    }

    if not csv_text or not csv_text.strip():
        result['is_valid'] = False
        result['errors'].append('CSV file is empty')
        return result

    lines = _split_lines(csv_text)

    header = lines[0].lower()
    if 'identity' not in header or 'user' not in header or 'access' not in header:
        result['warnings'].append(
            'CSV header may not match expected format: "Identity";"User";"AccessRights"'
        )

    valid_rows = 0
    for line_num, raw_line in enumerate(lines[1:], start=2):
        line = raw_line.strip()
        if not line:
            continue

        if len(split_fields(line)) < 3:
            result['warnings'].append(f"Line {line_num}: Malformed data - expected 3 columns")
            continue

        valid_rows += 1

    if valid_rows == 0:
        result['is_valid'] = False
        result['errors'].append('No valid data rows found in CSV')

    return result


# =============================================================================
# PARSING
# =============================================================================

def parse_csv(csv_text: str, access_right: str = FULL_ACCESS) -> Dict[str, Set[str]]:
    """
    Parse the export into identity -> set of users.

    PURPOSE: Build the mailbox grants map from the raw CSV

    PARAMETERS:
        csv_text: Raw file contents
        access_right: Access right to keep (exact, case-sensitive match)

    RETURNS:
        Dict[str, Set[str]]: Empty if the file has no data rows or no
        matching rows. That's a valid "nothing to manage" result, not an error.

    WHY THIS APPROACH:
        The header is skipped by position, not by name. Exchange exports
        sometimes localise the header text, but the column order is fixed.
        Malformed lines are skipped with a warning rather than failing the
        whole import, so one bad line doesn't block a 2,000 row file.
    """
    grants: Dict[str, Set[str]] = {}

    lines = _split_lines(csv_text or '')
    if len(lines) <= 1:
        return grants

    for raw_line in lines[1:]:
        line = raw_line.strip()
        if not line:
            continue

        fields = split_fields(line)
        if len(fields) < 3:
            print(f"Warning: Skipping malformed CSV line: {line}")
            continue

        identity = clean_field(fields[0])
        user = clean_field(fields[1])
        rights = clean_field(fields[2])

        if rights != access_right:
            continue

        grants.setdefault(identity, set()).add(user)

    return grants


# =============================================================================
# CHANGE SET
# =============================================================================

def _change(identity: str, user: str, action: str) -> Dict[str, str]:
    return {
        'identity': identity,
        'user': user,
        'access_rights': FULL_ACCESS,
        'action': action
    }


def diff_grants(
    original: Dict[str, Set[str]],
    current: Dict[str, Set[str]]
) -> Optional[List[Dict[str, str]]]:
    """
    Work out which grants were removed and which were added.

    PURPOSE: Produce the minimal change set turning original into current

    PARAMETERS:
        original: Grants as loaded from the export
        current: Grants after the operator's edits

    RETURNS:
        List of change records (removals first, then additions),
        or None if nothing changed.

    AVIATION ANALOGY:
        Comparing the planned manifest to the boarded manifest:
        no-shows are removals, standbys who boarded are additions.
    """
    changes = []

    for identity, original_users in original.items():
        current_users = current.get(identity, set())
        for user in original_users:
            if user not in current_users:
                changes.append(_change(identity, user, ACTION_REMOVE))

    for identity, current_users in current.items():
        original_users = original.get(identity, set())
        for user in current_users:
            if user not in original_users:
                changes.append(_change(identity, user, ACTION_ADD))

    if not changes:
        return None
    return changes


def serialize_changes(changes: List[Dict[str, str]]) -> str:
    """
    Render change records as the changes CSV.

    Values are written as-is inside the quotes; identities and users never
    contain quotes or semicolons once they've been through parse_csv().
    """
    lines = [CHANGES_HEADER]
    for change in changes:
        lines.append(
            f'"{change["identity"]}";"{change["user"]}";'
            f'"{FULL_ACCESS}";"{change["action"]}"'
        )
    return '\n'.join(lines)


def generate_changes_csv(
    original: Dict[str, Set[str]],
    current: Dict[str, Set[str]]
) -> Optional[str]:
    """Diff and serialize in one step. Returns None when there are no changes."""
    changes = diff_grants(original, current)
    if changes is None:
        return None
    return serialize_changes(changes)


# =============================================================================
# FILE I/O
# =============================================================================

def read_csv_file(file_path: str, encoding: str = 'utf-8') -> str:
    """
    Read the export file into text.

    RAISES:
        FileReadError: If the file can't be opened or decoded
    """
    path = Path(file_path).expanduser()
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Error reading the file {path}: {e}") from e


def write_changes_csv(
    csv_content: str,
    output_dir: str = '.',
    filename: str = CHANGES_FILENAME,
    encoding: str = 'utf-8'
) -> str:
    """
    Save the changes CSV.

    PARAMETERS:
        csv_content: Output of serialize_changes()
        output_dir: Directory to write into (created if missing)
        filename: File name, mailbox_changes.csv by default
        encoding: Text encoding

    RETURNS:
        str: Path to the written file
    """
    output_path = Path(output_dir).expanduser() / filename
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding=encoding, newline='') as f:
        f.write(csv_content)

    return str(output_path)
