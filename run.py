#!/usr/bin/env python3
"""
MAILBOX ACCESS TOOLKIT CLI

PURPOSE: Command-line interface for reviewing and editing shared mailbox
         FullAccess grants from an Exchange permission export, and
         exporting only the changes as a new CSV

R EQUIVALENT: Like an R package's main script that routes to different
              functions based on command-line arguments

AVIATION ANALOGY: Like a dispatch terminal - load the manifest, make
                  the changes, print the change slip

USAGE EXAMPLES:
    # Validate an export
    python3 run.py --input permissions.csv --validate

    # View mailboxes matching "sales"
    python3 run.py --input permissions.csv --view --filter sales

    # List every user, or one user's mailboxes
    python3 run.py --input permissions.csv --list-users
    python3 run.py --input permissions.csv --user-mailboxes jane@contoso.com

    # Grant/revoke and export mailbox_changes.csv
    python3 run.py --input permissions.csv \\
        --add "sales@contoso.com" "amy@contoso.com" \\
        --remove "hr@contoso.com" "bob@contoso.com" \\
        --export --output outputs

    # Interactive shell
    python3 run.py --input permissions.csv --interactive
"""

import shlex
import sys
from pathlib import Path

from cli import (
    create_parser,
    MailboxSession,
    render_console,
    print_header,
    print_success,
    print_error,
    print_warning,
    print_info,
    print_list_item,
)
from config import load_settings
from managers.access_store import AccessStore
from parsers.csv_parser import (
    CSVValidationError,
    FileReadError,
    read_csv_file,
    serialize_changes,
    validate_csv,
)
from formatters.access_excel_formatter import AccessExcelFormatter


def render_nothing(grants, filter_text='') -> None:
    """Batch runs only show tables when --view asks for them."""


# ============================================================================
# COMMAND HANDLERS
# ============================================================================

def handle_validate(args, settings) -> bool:
    """Validate the export and report what was found. Returns is_valid."""
    csv_text = read_csv_file(args.input, settings['encoding'])
    result = validate_csv(csv_text)

    print_header(f"Validation: {Path(args.input).name}")
    for error in result['errors']:
        print_error(error)
    for warning in result['warnings']:
        print_warning(warning)

    if result['is_valid']:
        print_success("CSV is valid")
    return result['is_valid']


def handle_view(session: MailboxSession, args) -> None:
    """Show mailboxes and users, optionally filtered by identity."""
    print_header("Shared Mailboxes")
    render_console(session.store.current, args.filter)


def handle_list_users(session: MailboxSession) -> None:
    """List every user with FullAccess anywhere."""
    users = session.store.list_users()
    print_header(f"Users ({len(users)})")
    for user in users:
        print_list_item(user)


def handle_user_mailboxes(session: MailboxSession, user: str) -> None:
    """List the mailboxes one user can open."""
    store = session.store
    mailboxes = store.mailboxes_for(user)

    print_header(f"Mailboxes for {user}")
    if not mailboxes:
        print_info("No FullAccess grants found for this user.")
        return

    for mailbox in mailboxes:
        print_list_item(mailbox)
    print()
    noun = "mailbox" if len(mailboxes) == 1 else "mailboxes"
    print_info(f"{len(mailboxes)} {noun} (maximum is {store.max_mailboxes_per_user})")
    if store.has_max_mailboxes(user):
        print_warning("User is at the mailbox limit; further grants will be refused.")


def handle_suggest(session: MailboxSession, text: str, limit: int) -> None:
    """Show user suggestions for partially typed text."""
    suggestions = session.suggest(text, limit)
    if not suggestions:
        print_info(f"No users match '{text}'.")
        return
    for user in suggestions:
        print_list_item(user)


def handle_edits(session: MailboxSession, edits) -> int:
    """
    Apply --add/--remove edits in the order given.

    RETURNS:
        int: Number of edits that were refused
    """
    refused = 0
    for action, identity, user in edits:
        if action == 'add':
            result = session.add_user(identity, user)
        else:
            result = session.remove_user(identity, user)
        if not result['success']:
            refused += 1
    return refused


def handle_show_changes(session: MailboxSession) -> None:
    """Print the pending changes CSV to the terminal."""
    changes = session.store.pending_changes()
    print_header("Pending Changes")
    if changes is None:
        print_info("No changes detected.")
        return
    print(serialize_changes(changes))
    print()
    print_info(f"{len(changes)} change" + ("" if len(changes) == 1 else "s"))


def handle_excel_report(session: MailboxSession, output_path: str) -> None:
    """Export the review workbook."""
    formatter = AccessExcelFormatter(session.store)
    path = formatter.export_access_report(output_path, session.source_name)
    print_success(f"Review workbook saved to {path}")


# ============================================================================
# INTERACTIVE SHELL
# ============================================================================

INTERACTIVE_HELP = """Commands:
  view                    Show all mailboxes (honours the current search)
  search [TEXT]           Filter mailboxes by identity; no TEXT clears it
  users                   List all users
  mailboxes USER          List a user's mailboxes
  suggest TEXT            Suggest users matching TEXT
  add IDENTITY USER       Grant FullAccess
  remove IDENTITY USER    Revoke FullAccess
  changes                 Show pending changes
  export [DIR]            Write the changes CSV
  excel FILE              Write the review workbook
  load FILE               Load a different export (discards edits)
  quit                    Leave"""


def run_interactive(session: MailboxSession, settings, output_dir: str) -> None:
    """
    Line-oriented editing shell.

    Each command runs to completion before the next prompt, so there is
    never more than one load or edit in flight.
    """
    print_info(INTERACTIVE_HELP)

    while True:
        try:
            line = input("mailbox> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        try:
            parts = shlex.split(line)
        except ValueError as e:
            print_error(f"Could not read command: {e}")
            continue
        if not parts:
            continue

        command, params = parts[0].lower(), parts[1:]

        if command in ('quit', 'exit'):
            break
        elif command == 'help':
            print_info(INTERACTIVE_HELP)
        elif command == 'view':
            session.search(session.filter_text)
        elif command == 'search':
            session.search(' '.join(params))
        elif command == 'users':
            handle_list_users(session)
        elif command == 'mailboxes' and len(params) == 1:
            handle_user_mailboxes(session, params[0])
        elif command == 'suggest' and len(params) == 1:
            handle_suggest(session, params[0], settings['suggestion_limit'])
        elif command == 'add' and len(params) == 2:
            session.add_user(params[0], params[1])
        elif command == 'add' and len(params) == 1:
            session.add_user(params[0], '')
        elif command == 'remove' and len(params) == 2:
            session.remove_user(params[0], params[1])
        elif command == 'changes':
            handle_show_changes(session)
        elif command == 'export':
            session.export_changes(params[0] if params else output_dir)
        elif command == 'excel' and len(params) == 1:
            handle_excel_report(session, params[0])
        elif command == 'load' and len(params) == 1:
            try:
                session.load_file(params[0])
            except (FileReadError, CSVValidationError) as e:
                print_error(str(e))
        else:
            print_error(f"Unknown command or wrong arguments: {line.strip()}")


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def main():
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except FileNotFoundError as e:
        print_error(str(e))
        sys.exit(1)

    if not args.input:
        parser.print_help()
        return

    try:
        if args.validate:
            if not handle_validate(args, settings):
                sys.exit(1)
            return

        store = AccessStore(settings['max_mailboxes_per_user'])
        session = MailboxSession(
            store,
            render=render_console if args.interactive else render_nothing,
            access_right=settings['access_right'],
            encoding=settings['encoding'],
            output_filename=settings['output_filename']
        )
        session.load_file(args.input)

    except (FileReadError, CSVValidationError) as e:
        print_error(str(e))
        sys.exit(1)

    if args.verbose and session.validation:
        for warning in session.validation['warnings']:
            print_warning(warning)

    refused = handle_edits(session, args.edits or [])

    if args.interactive:
        run_interactive(session, settings, args.output)
        return

    if args.view:
        handle_view(session, args)

    if args.list_users:
        handle_list_users(session)

    if args.user_mailboxes:
        handle_user_mailboxes(session, args.user_mailboxes)

    if args.suggest:
        handle_suggest(session, args.suggest, settings['suggestion_limit'])

    if args.edits:
        handle_show_changes(session)

    if args.export:
        session.export_changes(args.output)

    if args.excel_report:
        handle_excel_report(session, args.excel_report)

    if refused:
        print_warning(f"{refused} edit" + ("" if refused == 1 else "s") + " refused")
        sys.exit(2)


if __name__ == "__main__":
    main()
