"""
Mailbox Session
===============

Ties one editing session together: load the export, apply edits, export the
changes. The AccessStore only returns results; this is where results turn
into operator messages and table refreshes.

Two hooks can be swapped out (the tests do this):
    notify(message, severity)   - severity is info, success, warning or error
    render(grants, filter_text) - called after every successful edit

AVIATION ANALOGY: The store is the aircraft's systems; this is the
flight deck. Systems report status, the flight deck decides what
to annunciate and what to put on the display.
"""

from typing import Callable, Dict, List, Optional, Set, Any

from parsers.csv_parser import (
    CSVValidationError,
    CHANGES_FILENAME,
    FULL_ACCESS,
    generate_changes_csv,
    parse_csv,
    read_csv_file,
    validate_csv,
    write_changes_csv,
)
from managers.access_store import AccessStore, DEFAULT_SUGGESTION_LIMIT
from formatters.mailbox_table_formatter import render_mailboxes
from .utils import print_message

# Default notifier: prefix by severity, errors to stderr
notify_console = print_message


def render_console(grants: Dict[str, Set[str]], filter_text: str = '') -> None:
    """Default renderer: print the mailbox table."""
    print(render_mailboxes(grants, filter_text))


class MailboxSession:
    """
    PURPOSE: Run load -> edit -> export for one CSV export

    ATTRIBUTES:
        store: AccessStore being edited
        filter_text: Last search text, reused on every re-render
        validation: Result of the most recent validate_csv() call
        source_name: Path of the last successfully loaded file

    EXAMPLE:
        session = MailboxSession(AccessStore())
        session.load_file("permissions.csv")
        session.add_user("sales@contoso.com", "jane@contoso.com")
        session.export_changes("outputs")
    """

    def __init__(
        self,
        store: AccessStore,
        notify: Callable[[str, str], None] = None,
        render: Callable[[Dict[str, Set[str]], str], None] = None,
        access_right: str = FULL_ACCESS,
        encoding: str = 'utf-8',
        output_filename: str = CHANGES_FILENAME
    ):
        self.store = store
        self.notify = notify or notify_console
        self.render = render or render_console
        self.access_right = access_right
        self.encoding = encoding
        self.output_filename = output_filename

        self.filter_text = ''
        self.validation: Optional[Dict[str, Any]] = None
        self.source_name: Optional[str] = None

    # =========================================================================
    # LOADING
    # =========================================================================

    def load_file(self, file_path: str) -> int:
        """
        Read and load an export file.

        RETURNS:
            int: Number of shared mailboxes loaded

        RAISES:
            FileReadError: File couldn't be read; the store is left as it was
            CSVValidationError: File isn't usable; the store is emptied
        """
        csv_text = read_csv_file(file_path, self.encoding)
        count = self.load_text(csv_text)
        self.source_name = str(file_path)
        return count

    def load_text(self, csv_text: str) -> int:
        """
        Validate, parse and load CSV text in one go.

        Validation failure empties the store rather than leaving the previous
        file's grants on screen under a failed load.
        """
        self.validation = validate_csv(csv_text)
        if not self.validation['is_valid']:
            self.store.clear()
            self.source_name = None
            raise CSVValidationError(self.validation)

        grants = parse_csv(csv_text, self.access_right)
        self.store.load(grants)
        self.filter_text = ''

        if self.store.original:
            self.render(self.store.current, self.filter_text)
            self.notify("CSV loaded successfully! You can now manage mailbox access.", 'success')
        else:
            self.notify("No 'FullAccess' entries found or CSV is empty after parsing.", 'warning')

        return len(self.store.original)

    # =========================================================================
    # EDITING
    # =========================================================================

    def add_user(self, identity: str, user: str) -> Dict[str, Any]:
        """
        Add a user to a mailbox, reporting the outcome.

        The user is trimmed first; a blank user never reaches the store.
        """
        user = (user or '').strip()
        if not user:
            message = "Please enter a user email to add."
            self.notify(message, 'warning')
            return {'success': False, 'status': 'empty_user', 'severity': 'warning',
                    'identity': identity, 'user': user, 'message': message,
                    'mailboxes': [], 'changed': False}

        result = self.store.add_grant(identity, user)
        if result['success']:
            self.render(self.store.current, self.filter_text)
        self.notify(result['message'], result['severity'])
        return result

    def remove_user(self, identity: str, user: str) -> Dict[str, Any]:
        """
        Remove a user from a mailbox, reporting the outcome.

        An unknown mailbox is a silent no-op; a known mailbox always reports
        the removal, whether or not the user was on it.
        """
        mailbox_known = identity in self.store.current
        result = self.store.remove_grant(identity, user)
        if mailbox_known:
            self.render(self.store.current, self.filter_text)
            self.notify(result['message'], result['severity'])
        return result

    def search(self, filter_text: str) -> None:
        """Filter the mailbox table by identity and re-render."""
        self.filter_text = filter_text or ''
        self.render(self.store.current, self.filter_text)

    def suggest(self, text: str, limit: int = DEFAULT_SUGGESTION_LIMIT) -> List[str]:
        return self.store.suggest_users(text, limit)

    # =========================================================================
    # EXPORT
    # =========================================================================

    def export_changes(self, output_dir: str = '.') -> Optional[str]:
        """
        Write mailbox_changes.csv if anything changed.

        RETURNS:
            str: Path written, or None when there was nothing to export
        """
        changes_csv = generate_changes_csv(self.store.original, self.store.current)
        if changes_csv is None:
            self.notify("No changes detected to download.", 'info')
            return None

        path = write_changes_csv(
            changes_csv, output_dir,
            filename=self.output_filename,
            encoding=self.encoding
        )
        self.notify("Changes CSV downloaded successfully!", 'success')
        return path
