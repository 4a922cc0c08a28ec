"""
Access Excel Formatter - Export shared mailbox access to Excel

PURPOSE: Generate a review workbook of current mailbox access and the
         pending changes, for sign-off before the changes CSV is applied

R EQUIVALENT: Like openxlsx or writexl packages for creating
formatted Excel workbooks

AVIATION ANALOGY: Like the loadsheet printout handed to the captain -
the same numbers the system holds, laid out so a human can check them
before signing

REPORT FORMAT:
    Tab 1: Summary - Counts and overview statistics
    Tab 2: Current Access - Every mailbox/user grant in the working copy
    Tab 3: Pending Changes - Add/Remove records that will be exported
    Tab 4: User Load - Mailbox count per user, quota breaches highlighted
"""

from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from managers.access_store import AccessStore
from parsers.csv_parser import ACTION_ADD, ACTION_REMOVE


class AccessExcelFormatter:
    """
    PURPOSE: Export shared mailbox access and pending changes to Excel

    PARAMETERS:
        store: AccessStore holding the loaded and edited grants

    EXAMPLE:
        store = AccessStore()
        store.load(parse_csv(text))
        formatter = AccessExcelFormatter(store)
        formatter.export_access_report("mailbox_review.xlsx")

    FORMATTING FEATURES:
    - Styled header rows and alternating row colors
    - Freeze panes for easy navigation
    - Green/red fills for Add/Remove changes
    - Users at the mailbox quota highlighted in amber
    """

    # =========================================================================
    # STYLE DEFINITIONS
    # =========================================================================

    # Primary header style (dark blue with white text)
    HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
    HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
    HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)

    # Alternating row colors for readability
    ALT_ROW_FILL = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")

    # Change/status colors
    ADD_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
    ADD_FONT = Font(color="006100", bold=True)

    REMOVE_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
    REMOVE_FONT = Font(color="9C0006", bold=True)

    WARNING_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
    WARNING_FONT = Font(color="9C5700", bold=True)

    # Title styling
    TITLE_FONT = Font(size=18, bold=True, color="2F5496")
    SUBTITLE_FONT = Font(size=12, bold=True, color="595959")

    # Borders
    THIN_BORDER = Border(
        left=Side(style='thin', color='B4B4B4'),
        right=Side(style='thin', color='B4B4B4'),
        top=Side(style='thin', color='B4B4B4'),
        bottom=Side(style='thin', color='B4B4B4')
    )

    def __init__(self, store: AccessStore):
        """Initialize with an AccessStore instance."""
        self.store = store

    def export_access_report(self, output_path: str, source_name: str = None) -> str:
        """
        Create the review workbook.

        PARAMETERS:
            output_path: Where to save the Excel file
            source_name: Name of the CSV the grants came from (shown on Summary)

        RETURNS:
            str: Path to generated file
        """
        changes = self.store.pending_changes() or []

        wb = Workbook()

        # Remove default sheet
        wb.remove(wb.active)

        self._create_summary_sheet(wb, changes, source_name)
        self._create_current_access_sheet(wb)
        self._create_changes_sheet(wb, changes)
        self._create_user_load_sheet(wb)

        # Ensure output directory exists
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        wb.save(str(output_path))
        return str(output_path)

    # =========================================================================
    # SHEET BUILDERS
    # =========================================================================

    def _create_summary_sheet(self, wb: Workbook, changes: List[Dict[str, str]],
                              source_name: str = None) -> None:
        """Create the Summary tab with headline counts."""
        ws = wb.create_sheet("Summary")

        ws['A1'] = "Shared Mailbox Access Review"
        ws['A1'].font = self.TITLE_FONT
        ws['A2'] = f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}"
        ws['A2'].font = self.SUBTITLE_FONT

        users = self.store.list_users()
        at_quota = [user for user in users if self.store.has_max_mailboxes(user)]

        metrics = [
            ('Source file', source_name or 'N/A'),
            ('Shared mailboxes', len(self.store.current)),
            ('Users with FullAccess', len(users)),
            ('Grants', sum(len(u) for u in self.store.current.values())),
            ('Pending additions', sum(1 for c in changes if c['action'] == ACTION_ADD)),
            ('Pending removals', sum(1 for c in changes if c['action'] == ACTION_REMOVE)),
            (f"Users at quota ({self.store.max_mailboxes_per_user})", len(at_quota)),
        ]

        for i, (label, value) in enumerate(metrics):
            row = 4 + i
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)

        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['B'].width = 40

    def _create_current_access_sheet(self, wb: Workbook) -> None:
        """Create the Current Access tab, one row per grant."""
        ws = wb.create_sheet("Current Access")
        self._write_header(ws, ['Identity', 'User', 'Access Rights'])

        row = 2
        for identity in sorted(self.store.current):
            for user in sorted(self.store.current[identity]):
                self._write_row(ws, row, [identity, user, 'FullAccess'])
                row += 1

        self._set_widths(ws, [40, 40, 15])
        ws.freeze_panes = 'A2'

    def _create_changes_sheet(self, wb: Workbook, changes: List[Dict[str, str]]) -> None:
        """Create the Pending Changes tab with Add/Remove color coding."""
        ws = wb.create_sheet("Pending Changes")
        self._write_header(ws, ['Identity', 'User', 'Access Rights', 'Action'])

        if not changes:
            ws.cell(row=2, column=1, value="No changes detected.").font = Font(italic=True, color="666666")

        for i, change in enumerate(changes, 2):
            self._write_row(ws, i, [
                change['identity'], change['user'],
                change['access_rights'], change['action']
            ])
            action_cell = ws.cell(row=i, column=4)
            if change['action'] == ACTION_ADD:
                action_cell.fill = self.ADD_FILL
                action_cell.font = self.ADD_FONT
            else:
                action_cell.fill = self.REMOVE_FILL
                action_cell.font = self.REMOVE_FONT

        self._set_widths(ws, [40, 40, 15, 12])
        ws.freeze_panes = 'A2'

    def _create_user_load_sheet(self, wb: Workbook) -> None:
        """Create the User Load tab: mailbox count per user."""
        ws = wb.create_sheet("User Load")
        self._write_header(ws, ['User', 'Mailbox Count', 'Mailboxes'])

        for i, user in enumerate(self.store.list_users(), 2):
            mailboxes = self.store.mailboxes_for(user)
            self._write_row(ws, i, [user, len(mailboxes), ', '.join(mailboxes)])

            if self.store.has_max_mailboxes(user):
                count_cell = ws.cell(row=i, column=2)
                count_cell.fill = self.WARNING_FILL
                count_cell.font = self.WARNING_FONT

        self._set_widths(ws, [40, 15, 80])
        ws.freeze_panes = 'A2'

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _write_header(self, ws, headers: List[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = self.HEADER_FILL
            cell.font = self.HEADER_FONT
            cell.alignment = self.HEADER_ALIGNMENT
            cell.border = self.THIN_BORDER

    def _write_row(self, ws, row: int, values: List[Any]) -> None:
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = self.THIN_BORDER
            if row % 2 == 1:
                cell.fill = self.ALT_ROW_FILL

    def _set_widths(self, ws, widths: List[int]) -> None:
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width
