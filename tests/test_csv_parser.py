"""
Unit Tests for the CSV Parser

PURPOSE: Test validation, parsing, diffing and serialization of the
         shared mailbox permission export

R EQUIVALENT: Like testthat for R - structured unit tests

RUN TESTS:
    python3 -m pytest tests/ -v
    OR
    python3 tests/test_csv_parser.py
"""

import os
import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from parsers.csv_parser import (
    CSVValidationError,
    FileReadError,
    split_fields,
    validate_csv,
    parse_csv,
    diff_grants,
    serialize_changes,
    generate_changes_csv,
    read_csv_file,
    write_changes_csv,
    CHANGES_HEADER,
)


HEADER = '"Identity";"User";"AccessRights"'

SAMPLE_CSV = (
    '"Identity";"User";"AccessRights"\n'
    '"sales@x.com";"a@x.com";"FullAccess"\n'
    '"sales@x.com";"b@x.com";"ReadOnly"'
)


class TestSplitFields(unittest.TestCase):
    """Test quote-aware field splitting."""

    def test_simple_quoted_fields(self):
        """Plain quoted fields split on semicolons."""
        fields = split_fields('"a";"b";"c"')
        self.assertEqual(fields, ['"a"', '"b"', '"c"'])

    def test_semicolon_inside_quotes(self):
        """Semicolons inside quotes don't split the field."""
        fields = split_fields('"Sales; West";"a@x.com";"FullAccess"')
        self.assertEqual(len(fields), 3)
        self.assertEqual(fields[0], '"Sales; West"')

    def test_unquoted_fields(self):
        """Unquoted fields still split on semicolons."""
        self.assertEqual(split_fields('a;b;c'), ['a', 'b', 'c'])

    def test_mixed_run_is_one_field(self):
        """Unquoted text next to a quoted chunk is one field."""
        self.assertEqual(split_fields('ab"c;d"e;f'), ['ab"c;d"e', 'f'])

    def test_empty_fields_are_dropped(self):
        """Empty fields produce no token, so the count falls short."""
        self.assertEqual(split_fields('"a";;"c"'), ['"a"', '"c"'])


class TestValidateCSV(unittest.TestCase):
    """Test pre-load validation."""

    def test_header_only_is_invalid(self):
        """A header with no data rows fails with a single error."""
        result = validate_csv(HEADER)
        self.assertFalse(result['is_valid'])
        self.assertEqual(result['errors'], ["No valid data rows found in CSV"])
        self.assertEqual(result['warnings'], [])

    def test_empty_text_is_invalid(self):
        """Whitespace-only input is reported as empty."""
        result = validate_csv("   \n  ")
        self.assertFalse(result['is_valid'])
        self.assertIn('CSV file is empty', result['errors'])

    def test_valid_file(self):
        """Well-formed export passes without warnings."""
        result = validate_csv(SAMPLE_CSV)
        self.assertTrue(result['is_valid'])
        self.assertEqual(result['errors'], [])
        self.assertEqual(result['warnings'], [])

    def test_unexpected_header_is_warning_only(self):
        """Unknown header text warns but doesn't fail."""
        text = '"Mailbox";"Member";"Rights"\n"s@x.com";"a@x.com";"FullAccess"'
        result = validate_csv(text)
        self.assertTrue(result['is_valid'])
        self.assertEqual(len(result['warnings']), 1)
        self.assertIn('header', result['warnings'][0])

    def test_header_check_is_case_insensitive(self):
        """IDENTITY/USER/ACCESSRIGHTS in caps is fine."""
        text = 'IDENTITY;USER;ACCESSRIGHTS\ns@x.com;a@x.com;FullAccess'
        result = validate_csv(text)
        self.assertEqual(result['warnings'], [])

    def test_malformed_line_warns(self):
        """A short line warns with its 1-based line number."""
        text = SAMPLE_CSV + '\n"broken";"line"'
        result = validate_csv(text)
        self.assertTrue(result['is_valid'])
        self.assertIn("Line 4: Malformed data - expected 3 columns", result['warnings'])

    def test_all_lines_malformed_is_invalid(self):
        """If every data line is short, the file is invalid."""
        text = HEADER + '\n"a";"b"\n"c"'
        result = validate_csv(text)
        self.assertFalse(result['is_valid'])
        self.assertEqual(len(result['warnings']), 2)
        self.assertEqual(result['errors'], ["No valid data rows found in CSV"])

    def test_blank_lines_are_ignored(self):
        """Blank lines between rows are neither counted nor warned."""
        text = HEADER + '\n\n"s@x.com";"a@x.com";"FullAccess"\n   \n'
        result = validate_csv(text)
        self.assertTrue(result['is_valid'])
        self.assertEqual(result['warnings'], [])


class TestParseCSV(unittest.TestCase):
    """Test parsing the export into identity -> users."""

    def test_drops_non_full_access(self):
        """Only FullAccess rows are kept."""
        grants = parse_csv(SAMPLE_CSV)
        self.assertEqual(grants, {'sales@x.com': {'a@x.com'}})

    def test_access_right_is_case_sensitive(self):
        """'fullaccess' is not 'FullAccess'."""
        text = HEADER + '\n"s@x.com";"a@x.com";"fullaccess"'
        self.assertEqual(parse_csv(text), {})

    def test_header_only_returns_empty(self):
        """Header-only input is an empty result, not an error."""
        self.assertEqual(parse_csv(HEADER), {})

    def test_empty_text_returns_empty(self):
        """Empty input returns an empty mapping."""
        self.assertEqual(parse_csv(''), {})

    def test_header_is_skipped_by_position(self):
        """First line is skipped even if it looks like data."""
        text = '"h@x.com";"a@x.com";"FullAccess"\n"s@x.com";"b@x.com";"FullAccess"'
        self.assertEqual(parse_csv(text), {'s@x.com': {'b@x.com'}})

    def test_duplicate_rows_collapse(self):
        """The same pair twice yields one grant."""
        row = '"s@x.com";"a@x.com";"FullAccess"'
        grants = parse_csv(HEADER + '\n' + row + '\n' + row)
        self.assertEqual(grants, {'s@x.com': {'a@x.com'}})

    def test_same_user_on_multiple_identities(self):
        """A user can appear under several mailboxes."""
        text = (HEADER + '\n'
                '"one@x.com";"a@x.com";"FullAccess"\n'
                '"two@x.com";"a@x.com";"FullAccess"')
        grants = parse_csv(text)
        self.assertEqual(grants, {'one@x.com': {'a@x.com'}, 'two@x.com': {'a@x.com'}})

    def test_malformed_lines_skipped(self):
        """Short lines are skipped; the rest of the file still loads."""
        text = (HEADER + '\n'
                '"broken";"line"\n'
                '"s@x.com";"a@x.com";"FullAccess"')
        self.assertEqual(parse_csv(text), {'s@x.com': {'a@x.com'}})

    def test_windows_line_endings(self):
        """CRLF exports parse the same as LF."""
        text = HEADER + '\r\n"s@x.com";"a@x.com";"FullAccess"\r\n'
        self.assertEqual(parse_csv(text), {'s@x.com': {'a@x.com'}})

    def test_semicolon_in_quoted_identity(self):
        """Quoted semicolons stay part of the identity."""
        text = HEADER + '\n"Sales; West";"a@x.com";"FullAccess"'
        self.assertEqual(parse_csv(text), {'Sales; West': {'a@x.com'}})

    def test_identity_is_case_sensitive(self):
        """Identities differing only in case are separate mailboxes."""
        text = (HEADER + '\n'
                '"Sales@x.com";"a@x.com";"FullAccess"\n'
                '"sales@x.com";"b@x.com";"FullAccess"')
        self.assertEqual(len(parse_csv(text)), 2)


class TestDiffGrants(unittest.TestCase):
    """Test the change set between original and current."""

    def test_no_changes_returns_none(self):
        """Identical snapshots produce None, not an empty list."""
        grants = {'s@x.com': {'a@x.com', 'b@x.com'}}
        self.assertIsNone(diff_grants(grants, {'s@x.com': {'a@x.com', 'b@x.com'}}))

    def test_both_empty_returns_none(self):
        self.assertIsNone(diff_grants({}, {}))

    def test_removed_identity(self):
        """Identity gone from current -> every user removed."""
        changes = diff_grants({'s@x.com': {'a@x.com', 'b@x.com'}}, {})
        self.assertEqual(len(changes), 2)
        self.assertTrue(all(c['action'] == 'Remove' for c in changes))
        self.assertEqual({c['user'] for c in changes}, {'a@x.com', 'b@x.com'})

    def test_added_identity(self):
        """Identity new in current -> every user added."""
        changes = diff_grants({}, {'new@x.com': {'a@x.com'}})
        self.assertEqual(changes, [{
            'identity': 'new@x.com',
            'user': 'a@x.com',
            'access_rights': 'FullAccess',
            'action': 'Add'
        }])

    def test_removals_come_before_additions(self):
        """All Remove records precede all Add records."""
        original = {'s@x.com': {'a@x.com'}, 't@x.com': {'c@x.com'}}
        current = {'s@x.com': {'b@x.com'}, 't@x.com': {'d@x.com'}}
        changes = diff_grants(original, current)
        actions = [c['action'] for c in changes]
        self.assertEqual(actions, ['Remove', 'Remove', 'Add', 'Add'])

    def test_swap_within_identity(self):
        """Replacing one user with another is one Remove and one Add."""
        changes = diff_grants({'s@x.com': {'a@x.com'}}, {'s@x.com': {'b@x.com'}})
        pairs = {(c['identity'], c['user'], c['action']) for c in changes}
        self.assertEqual(pairs, {
            ('s@x.com', 'a@x.com', 'Remove'),
            ('s@x.com', 'b@x.com', 'Add'),
        })


class TestSerializeChanges(unittest.TestCase):
    """Test the changes CSV format."""

    def test_header_and_rows(self):
        """Header line followed by one quoted line per record."""
        changes = [
            {'identity': 's@x.com', 'user': 'a@x.com', 'access_rights': 'FullAccess', 'action': 'Remove'},
            {'identity': 's@x.com', 'user': 'b@x.com', 'access_rights': 'FullAccess', 'action': 'Add'},
        ]
        text = serialize_changes(changes)
        self.assertEqual(text, (
            '"Identity";"User";"AccessRights";"Action"\n'
            '"s@x.com";"a@x.com";"FullAccess";"Remove"\n'
            '"s@x.com";"b@x.com";"FullAccess";"Add"'
        ))

    def test_generate_changes_csv_none_when_unchanged(self):
        grants = {'s@x.com': {'a@x.com'}}
        self.assertIsNone(generate_changes_csv(grants, {'s@x.com': {'a@x.com'}}))

    def test_additions_parse_back_to_grants(self):
        """Parsing the changes CSV of an all-additions diff rebuilds the grants."""
        grants = {
            'sales@x.com': {'a@x.com', 'b@x.com'},
            'hr@x.com': {'a@x.com'},
            'Ops; North': {'c@x.com'},
        }
        text = generate_changes_csv({}, grants)
        self.assertTrue(text.startswith(CHANGES_HEADER))
        self.assertEqual(parse_csv(text), grants)


class TestFileIO(unittest.TestCase):
    """Test reading the export and writing the changes file."""

    def setUp(self):
        """Create a temporary directory for file tests."""
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        """Clean up temporary directory."""
        self.temp_dir.cleanup()

    def test_read_csv_file(self):
        path = Path(self.temp_dir.name) / "export.csv"
        path.write_text(SAMPLE_CSV, encoding='utf-8')
        self.assertEqual(read_csv_file(str(path)), SAMPLE_CSV)

    def test_read_missing_file_raises(self):
        """Missing file -> FileReadError."""
        with self.assertRaises(FileReadError):
            read_csv_file(os.path.join(self.temp_dir.name, "missing.csv"))

    def test_read_bad_encoding_raises(self):
        """Undecodable bytes -> FileReadError, not UnicodeDecodeError."""
        path = Path(self.temp_dir.name) / "latin1.csv"
        path.write_bytes(b'"Identity";"User";"AccessRights"\n"caf\xe9";"a@x.com";"FullAccess"')
        with self.assertRaises(FileReadError):
            read_csv_file(str(path), encoding='utf-8')

    def test_write_changes_csv_default_name(self):
        """Changes file is written as mailbox_changes.csv."""
        out_dir = os.path.join(self.temp_dir.name, "outputs")
        path = write_changes_csv('"Identity";"User";"AccessRights";"Action"', out_dir)
        self.assertEqual(os.path.basename(path), "mailbox_changes.csv")
        with open(path, encoding='utf-8') as f:
            self.assertEqual(f.read(), '"Identity";"User";"AccessRights";"Action"')


class TestCSVValidationError(unittest.TestCase):
    """Test the validation exception."""

    def test_carries_errors_and_warnings(self):
        result = validate_csv(HEADER)
        error = CSVValidationError(result)
        self.assertEqual(error.errors, ["No valid data rows found in CSV"])
        self.assertIn("No valid data rows found in CSV", str(error))
        self.assertIsInstance(error, ValueError)


# ============================================================================
# RUN TESTS
# ============================================================================

if __name__ == "__main__":
    # Run with verbose output
    unittest.main(verbosity=2)
