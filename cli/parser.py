"""
CLI Argument Parser
===================

Defines all command-line arguments for the Mailbox Access Toolkit.

WHY SEPARATE FILE: Keeps argument definitions organized and makes
it easy to see all available commands at a glance.
"""

import argparse


class EditAction(argparse.Action):
    """
    Collect --add and --remove into one ordered list of edits.

    Each entry is (action, identity, user), where action is the option's
    const ('add' or 'remove'). Edits are applied in command-line order.
    """

    def __call__(self, parser, namespace, values, option_string=None):
        edits = getattr(namespace, self.dest, None) or []
        identity, user = values
        edits.append((self.const, identity, user))
        setattr(namespace, self.dest, edits)


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser.

    WHY THIS APPROACH: argparse provides robust command-line parsing
    with automatic help generation and type checking.
    """
    parser = argparse.ArgumentParser(
        description="Mailbox Access Toolkit - Review and edit shared mailbox FullAccess grants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Check an export before loading it:
    python3 run.py --input permissions.csv --validate

  View mailboxes, filtered by identity:
    python3 run.py --input permissions.csv --view --filter sales

  Which mailboxes does a user have?
    python3 run.py --input permissions.csv --user-mailboxes jane@contoso.com

  Grant and revoke, then export the changes:
    python3 run.py --input permissions.csv \\
        --add "sales@contoso.com" "amy@contoso.com" \\
        --remove "hr@contoso.com" "bob@contoso.com" \\
        --export --output outputs

  Review workbook including pending changes:
    python3 run.py --input permissions.csv --add "sales@contoso.com" "amy@contoso.com" \\
        --excel-report outputs/mailbox_review.xlsx

  Interactive editing:
    python3 run.py --input permissions.csv --interactive
        """
    )

    # ==== GLOBAL OPTIONS ====
    parser.add_argument('--verbose', '-v', action='store_true',
                        help="Enable verbose output (shows CSV validation warnings)")
    parser.add_argument('--config', type=str, metavar='FILE',
                        help="YAML settings file overriding config/settings.yaml")
    parser.add_argument('--input', '-i', type=str, metavar='FILE',
                        help="Shared mailbox permission export (CSV)")

    # ==== VIEW OPERATIONS ====
    parser.add_argument('--validate', action='store_true',
                        help="Validate the CSV and report errors/warnings")
    parser.add_argument('--view', action='store_true',
                        help="Show shared mailboxes and their users")
    parser.add_argument('--filter', type=str, default='',
                        help="Only show mailboxes whose identity contains this text (use with --view)")
    parser.add_argument('--list-users', action='store_true',
                        help="List every user with FullAccess to any mailbox")
    parser.add_argument('--user-mailboxes', type=str, metavar='USER',
                        help="List the mailboxes a user has FullAccess to")
    parser.add_argument('--suggest', type=str, metavar='TEXT',
                        help="Suggest known users matching TEXT")

    # ==== EDIT OPERATIONS ====
    parser.add_argument('--add', dest='edits', action=EditAction, const='add',
                        nargs=2, metavar=('IDENTITY', 'USER'),
                        help="Grant USER FullAccess to IDENTITY (repeatable)")
    parser.add_argument('--remove', dest='edits', action=EditAction, const='remove',
                        nargs=2, metavar=('IDENTITY', 'USER'),
                        help="Revoke USER's FullAccess to IDENTITY (repeatable)")
    parser.add_argument('--interactive', action='store_true',
                        help="Open an interactive editing shell")

    # ==== EXPORT OPERATIONS ====
    parser.add_argument('--export', action='store_true',
                        help="Write the changes CSV (only if there are changes)")
    parser.add_argument('--output', '-o', type=str, default='.',
                        help="Output directory for the changes CSV")
    parser.add_argument('--excel-report', type=str, metavar='FILE',
                        help="Export a review workbook to Excel")

    return parser
