"""Vesting report workbook renderer.

Sheets:
- Pools: one row per pool with ledger totals at the valuation time
- Allocations: one section per pool, one row per beneficiary, SUM totals row
- Unlock Schedule: percent of a grant unlocked per pool at each projection time
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from vesting_domain.blocks import (
    AllocationLedgerBlock,
    BlockContext,
    BlockExecutor,
    UnlockProjectionBlock,
)
from vesting_domain.calendar_math import to_civil
from vesting_domain.schemas import BPS_DENOMINATOR, VestingWorkbookCFG

AMOUNT_FORMAT = '#,##0'
PERCENT_FORMAT = '0.0%'

# (ledger column, header label)
ALLOCATION_COLUMNS = [
    ("beneficiary", "Beneficiary"),
    ("total_granted", "Granted"),
    ("vested", "Vested"),
    ("claimed", "Claimed"),
    ("releasable", "Releasable"),
    ("remaining", "Remaining"),
    ("status", "Status"),
]

POOL_COLUMNS = [
    ("pool_id", "Pool"),
    ("pool_name", "Name"),
    ("asset", "Asset"),
    ("strategy", "Strategy"),
    ("status", "Status"),
    ("beneficiaries", "Beneficiaries"),
    ("total_granted", "Granted"),
    ("vested", "Vested"),
    ("claimed", "Claimed"),
    ("releasable", "Releasable"),
    ("remaining", "Remaining"),
]

AMOUNT_KEYS = {"total_granted", "vested", "claimed", "releasable", "remaining"}


def format_timestamp(timestamp: int) -> str:
    """ISO calendar date of a timestamp (YYYY-MM-DD)."""
    year, month, day = to_civil(timestamp)
    return f"{year:04d}-{month:02d}-{day:02d}"


class VestingWorkbookRenderer:
    """Render a vesting engine's state into an Excel workbook.

    Example:
        renderer = VestingWorkbookRenderer(engine, VestingWorkbookCFG(
            title="Monthly vesting report",
            projection_times=[t0, t1, t2],
        ))
        renderer.render("vesting.xlsx")
    """

    def __init__(self, engine, config: Optional[VestingWorkbookCFG] = None):
        self.engine = engine
        self.config = config or VestingWorkbookCFG()

        # Define styles
        self.title_font = Font(size=14, bold=True)
        self.bold_font = Font(bold=True)

        # Header styling
        self.header_font = Font(bold=True, color="FFFFFF")  # White text on dark blue
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")

        # Section header styling
        self.section_header_font = Font(italic=True, bold=True)
        self.section_header_fill = PatternFill(start_color="E7E6E6", end_color="E7E6E6", fill_type="solid")

        # Paused / revoked rows
        self.muted_font = Font(color="808080")

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        self.top_border = Border(top=Side(style='medium'))
        self.center_align = Alignment(horizontal='center', vertical='center')

    def render(self, output_path: str) -> str:
        wb = self.build_workbook()
        wb.save(output_path)
        return output_path

    def compute(self) -> BlockContext:
        """Run the report blocks and return their context."""
        as_of = self.config.as_of if self.config.as_of is not None else self.engine.now()

        context = BlockContext()
        context.set("vesting_engine", self.engine)
        context.set("as_of", as_of)
        context.set("projection_times", self.config.projection_times)

        executor = BlockExecutor([
            AllocationLedgerBlock(
                pool_ids=self.config.pool_ids,
                include_removed=self.config.include_removed,
            ),
            UnlockProjectionBlock(pool_ids=self.config.pool_ids),
        ])
        return executor.execute(context)

    def build_workbook(self) -> Workbook:
        context = self.compute()
        as_of: int = context.get("as_of")

        wb = Workbook()
        wb.remove(wb.active)

        self._render_pools_sheet(wb, context.get("pool_summary"), as_of)
        self._render_allocations_sheet(wb, context.get("pool_summary"), context.get("allocation_ledger"), as_of)
        if self.config.projection_times:
            self._render_projection_sheet(wb, context.get("unlock_projection"))

        return wb

    # ------------------------------------------------------------------ #
    # Sheets
    # ------------------------------------------------------------------ #

    def _render_pools_sheet(self, wb: Workbook, summary_df: pd.DataFrame, as_of: int) -> None:
        sheet = wb.create_sheet(title="Pools")
        sheet.sheet_view.showGridLines = False
        self._write_title(sheet, f"{self.config.title} - Pools as of {format_timestamp(as_of)}")

        header_row = 3
        self._write_header(sheet, header_row, [label for _, label in POOL_COLUMNS])

        for offset, record in enumerate(summary_df.to_dict("records")):
            row = header_row + 1 + offset
            record["status"] = "Paused" if record["paused"] else "Active"
            self._write_row(sheet, row, POOL_COLUMNS, record)
            if record["paused"]:
                for col in range(1, len(POOL_COLUMNS) + 1):
                    sheet.cell(row=row, column=col).font = self.muted_font

        sheet.freeze_panes = f"A{header_row + 1}"
        self._set_widths(sheet, [8, 24, 12, 12, 10, 14, 16, 16, 16, 16, 16])

    def _render_allocations_sheet(
        self,
        wb: Workbook,
        summary_df: pd.DataFrame,
        ledger_df: pd.DataFrame,
        as_of: int,
    ) -> None:
        sheet = wb.create_sheet(title="Allocations")
        sheet.sheet_view.showGridLines = False
        self._write_title(sheet, f"{self.config.title} - Allocations as of {format_timestamp(as_of)}")

        row = 3
        for pool in summary_df.to_dict("records"):
            section = sheet.cell(
                row=row,
                column=1,
                value=f"Pool {pool['pool_id']} - {pool['pool_name']} ({pool['asset']}, {pool['strategy']})",
            )
            section.font = self.section_header_font
            for col in range(1, len(ALLOCATION_COLUMNS) + 1):
                sheet.cell(row=row, column=col).fill = self.section_header_fill
            row += 1

            self._write_header(sheet, row, [label for _, label in ALLOCATION_COLUMNS])
            row += 1

            first_data_row = row
            pool_rows = ledger_df[ledger_df["pool_id"] == pool["pool_id"]]
            for record in pool_rows.to_dict("records"):
                record["status"] = self._allocation_status(record)
                self._write_row(sheet, row, ALLOCATION_COLUMNS, record)
                if record["revoked"] or record["removed"]:
                    for col in range(1, len(ALLOCATION_COLUMNS) + 1):
                        sheet.cell(row=row, column=col).font = self.muted_font
                row += 1

            self._write_totals_row(sheet, row, first_data_row, row - 1)
            row += 2

        self._set_widths(sheet, [44, 16, 16, 16, 16, 16, 10])

    def _render_projection_sheet(self, wb: Workbook, projection_df: pd.DataFrame) -> None:
        sheet = wb.create_sheet(title="Unlock Schedule")
        sheet.sheet_view.showGridLines = False
        self._write_title(sheet, f"{self.config.title} - Unlocked share of grant")

        times: List[int] = list(self.config.projection_times)
        header_row = 3
        self._write_header(
            sheet,
            header_row,
            ["Pool", "Strategy"] + [format_timestamp(t) for t in times],
        )

        row = header_row + 1
        for pool_id, pool_rows in projection_df.groupby("pool_id", sort=True):
            by_time: Dict[int, int] = {
                int(t): int(bp) for t, bp in zip(pool_rows["time"], pool_rows["unlocked_bp"])
            }
            first = pool_rows.iloc[0]
            sheet.cell(row=row, column=1, value=f"{int(pool_id)} - {first['pool_name']}")
            sheet.cell(row=row, column=2, value=str(first["strategy"]))
            for offset, t in enumerate(times):
                cell = sheet.cell(row=row, column=3 + offset, value=by_time[t] / BPS_DENOMINATOR)
                cell.number_format = PERCENT_FORMAT
                cell.border = self.thin_border
            row += 1

        sheet.freeze_panes = f"C{header_row + 1}"
        self._set_widths(sheet, [28, 12] + [12] * len(times))

    # ------------------------------------------------------------------ #
    # Cell helpers
    # ------------------------------------------------------------------ #

    def _write_title(self, sheet: Worksheet, text: str) -> None:
        title_cell = sheet["A1"]
        title_cell.value = text
        title_cell.font = self.title_font

    def _write_header(self, sheet: Worksheet, row: int, labels: List[str]) -> None:
        for col, label in enumerate(labels, start=1):
            cell = sheet.cell(row=row, column=col, value=label)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align
            cell.border = self.thin_border

    def _write_row(self, sheet: Worksheet, row: int, columns, record: Dict) -> None:
        for col, (key, _) in enumerate(columns, start=1):
            value = record[key]
            if key in AMOUNT_KEYS or key in ("pool_id", "beneficiaries"):
                value = int(value)
            cell = sheet.cell(row=row, column=col, value=value)
            cell.border = self.thin_border
            if key in AMOUNT_KEYS:
                cell.number_format = AMOUNT_FORMAT

    def _write_totals_row(self, sheet: Worksheet, row: int, first: int, last: int) -> None:
        label = sheet.cell(row=row, column=1, value="Total")
        label.font = self.bold_font
        label.border = self.top_border
        for col, (key, _) in enumerate(ALLOCATION_COLUMNS, start=1):
            if key not in AMOUNT_KEYS:
                continue
            letter = get_column_letter(col)
            # Empty pools still get a totals row that evaluates to zero
            value = f"=SUM({letter}{first}:{letter}{last})" if last >= first else 0
            cell = sheet.cell(row=row, column=col, value=value)
            cell.font = self.bold_font
            cell.number_format = AMOUNT_FORMAT
            cell.border = self.top_border

    @staticmethod
    def _allocation_status(record: Dict) -> str:
        if record["removed"]:
            return "Removed"
        if record["revoked"]:
            return "Revoked"
        return "Active"

    @staticmethod
    def _set_widths(sheet: Worksheet, widths: List[int]) -> None:
        for col, width in enumerate(widths, start=1):
            sheet.column_dimensions[get_column_letter(col)].width = width
