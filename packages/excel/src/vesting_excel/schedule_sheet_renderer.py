"""Vesting workbook renderer.

Writes a VestingPool to an Excel workbook:
- "Schedules": one row per beneficiary (inputs in blue, computed values in black)
- "Release Schedule": cumulative released amount per beneficiary per interval
- "Summary": pool-wide totals and custody check

Amounts come from the reporting blocks, so the sheet always agrees with the
pool's own release formula.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, localcontext
from typing import Dict, List, Union

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, Border, Side, Alignment, PatternFill
from openpyxl.utils import get_column_letter

from vesting_domain.blocks import (
    BlockContext,
    BlockExecutor,
    PoolPositionsBlock,
    ReleaseScheduleBlock,
)
from vesting_domain.schemas import VestingPool, VestingWorkbookCFG

logger = logging.getLogger(__name__)


HEADER_ROW = 4


def to_excel_datetime(timestamp: int) -> datetime:
    """Epoch seconds → naive UTC datetime (Excel has no time zones)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).replace(tzinfo=None)


class VestingSheetRenderer:
    """Render a vesting pool into a workbook."""

    def __init__(self, pool: VestingPool, config: VestingWorkbookCFG | None = None):
        self.pool = pool
        self.config = config or VestingWorkbookCFG()

        self.blue_font = Font(color="0000FF")  # inputs
        self.black_font = Font(color="000000")  # calculated values
        self.bold_font = Font(bold=True)
        self.title_font = Font(bold=True, size=14)

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
        self.totals_fill = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")

        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )
        self.top_border = Border(top=Side(style='medium'))
        self.center_align = Alignment(horizontal='center', vertical='center')

        self.amount_format = "#,##0" if self.config.display_decimals == 0 else "#,##0.00"

    def render(self, output_path: str) -> str:
        wb = self.build_workbook()
        wb.save(output_path)
        logger.info("Wrote vesting workbook for pool %s to %s", self.pool.address, output_path)
        return output_path

    def build_workbook(self) -> Workbook:
        context = self._compute()

        wb = Workbook()
        wb.remove(wb.active)

        if self.config.include_schedules_sheet:
            self._render_schedules_sheet(wb, context.get("pool_positions"))
        if self.config.include_release_sheet:
            self._render_release_sheet(wb, context.get("release_schedule"))
        if self.config.include_summary_sheet:
            self._render_summary_sheet(wb, context.get("pool_summary"), context.get("as_of"))

        return wb

    # ------------------------------------------------------------------ #
    # Computation
    # ------------------------------------------------------------------ #

    def _compute(self) -> BlockContext:
        context = BlockContext()
        context.set("vesting_pool", self.pool)
        context.set("as_of", self.config.as_of if self.config.as_of is not None else self.pool.now())
        context.set("release_schedule_cfg", self.config.release_schedule)

        executor = BlockExecutor([PoolPositionsBlock(), ReleaseScheduleBlock()])
        return executor.execute(context)

    def display_amount(self, amount: int) -> Union[int, Decimal]:
        """Scale a base-unit amount for display."""
        if self.config.display_decimals == 0:
            return int(amount)
        with localcontext() as ctx:
            ctx.prec = 100
            return Decimal(int(amount)).scaleb(-self.config.display_decimals)

    # ------------------------------------------------------------------ #
    # Sheets
    # ------------------------------------------------------------------ #

    def _write_title(self, ws, subtitle: str) -> None:
        ws.cell(row=1, column=1, value=self.config.title).font = self.title_font
        ws.cell(row=2, column=1, value=subtitle)

    def _write_headers(self, ws, headers: List[str]) -> None:
        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=HEADER_ROW, column=col_idx, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align
            cell.border = self.thin_border
            ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(header) + 2)

    def _render_schedules_sheet(self, wb: Workbook, positions_df: pd.DataFrame) -> None:
        ws = wb.create_sheet("Schedules")
        unit = self.pool.UNIT_VESTING_INTERVAL
        self._write_title(
            ws,
            f"Token {self.config.token_symbol} ({self.pool.token_address}) · "
            f"Pool {self.pool.address} · Launch {to_excel_datetime(self.pool.launch_time):%Y-%m-%d %H:%M} UTC",
        )

        headers = [
            "Beneficiary",
            "Lockup Amount",
            "Lockup (intervals)",
            "Vesting Amount",
            "Vesting (intervals)",
            "Total",
            "Claimed",
            "Claimable",
            "Fully Released (UTC)",
        ]
        self._write_headers(ws, headers)
        ws.column_dimensions["A"].width = 46

        schedules = {schedule.beneficiary: schedule for schedule in self.pool.schedules()}
        first_row = HEADER_ROW + 1
        row = first_row
        for position in positions_df.itertuples(index=False):
            schedule = schedules[position.beneficiary]
            values = [
                (position.beneficiary, self.blue_font, None),
                (self.display_amount(position.lockup_amount), self.blue_font, self.amount_format),
                (schedule.lockup_duration / unit, self.blue_font, "0.##"),
                (self.display_amount(position.vesting_amount), self.blue_font, self.amount_format),
                (schedule.vesting_duration / unit, self.blue_font, "0.##"),
                (self.display_amount(position.total_amount), self.black_font, self.amount_format),
                (self.display_amount(position.claimed), self.black_font, self.amount_format),
                (self.display_amount(position.claimable), self.black_font, self.amount_format),
                (to_excel_datetime(int(position.fully_released_time)), self.black_font, "yyyy-mm-dd hh:mm"),
            ]
            for col_idx, (value, font, number_format) in enumerate(values, start=1):
                cell = ws.cell(row=row, column=col_idx, value=value)
                cell.font = font
                cell.border = self.thin_border
                if number_format:
                    cell.number_format = number_format
            row += 1

        last_row = row - 1
        ws.cell(row=row, column=1, value="Total").font = self.bold_font
        for col_idx in (2, 4, 6, 7, 8):
            letter = get_column_letter(col_idx)
            formula = f"=SUM({letter}{first_row}:{letter}{last_row})" if last_row >= first_row else 0
            cell = ws.cell(row=row, column=col_idx, value=formula)
            cell.font = self.bold_font
            cell.fill = self.totals_fill
            cell.border = self.top_border
            cell.number_format = self.amount_format

        ws.freeze_panes = ws.cell(row=first_row, column=2)

    def _render_release_sheet(self, wb: Workbook, schedule_df: pd.DataFrame) -> None:
        ws = wb.create_sheet("Release Schedule")
        self._write_title(ws, f"Cumulative {self.config.token_symbol} released per interval")

        beneficiaries = self.pool.beneficiaries()
        headers = ["Period", "Date (UTC)"] + beneficiaries + ["Total"]
        self._write_headers(ws, headers)
        ws.column_dimensions["B"].width = 18

        # period -> beneficiary -> cumulative released
        by_period: Dict[int, Dict[str, int]] = {}
        timestamps: Dict[int, int] = {}
        for record in schedule_df.itertuples(index=False):
            period = int(record.period)
            by_period.setdefault(period, {})[record.beneficiary] = int(record.total_released)
            timestamps[period] = int(record.timestamp)

        first_col = 3
        last_col = first_col + len(beneficiaries) - 1
        row = HEADER_ROW + 1
        for period in sorted(by_period):
            ws.cell(row=row, column=1, value=period).border = self.thin_border
            date_cell = ws.cell(row=row, column=2, value=to_excel_datetime(timestamps[period]))
            date_cell.number_format = "yyyy-mm-dd"
            date_cell.border = self.thin_border

            for offset, beneficiary in enumerate(beneficiaries):
                cell = ws.cell(
                    row=row,
                    column=first_col + offset,
                    value=self.display_amount(by_period[period].get(beneficiary, 0)),
                )
                cell.font = self.black_font
                cell.number_format = self.amount_format
                cell.border = self.thin_border

            total_cell = ws.cell(
                row=row,
                column=last_col + 1,
                value=f"=SUM({get_column_letter(first_col)}{row}:{get_column_letter(last_col)}{row})",
            )
            total_cell.font = self.bold_font
            total_cell.number_format = self.amount_format
            total_cell.border = self.thin_border
            row += 1

        ws.freeze_panes = ws.cell(row=HEADER_ROW + 1, column=first_col)

    def _render_summary_sheet(self, wb: Workbook, summary_df: pd.DataFrame, as_of: int) -> None:
        ws = wb.create_sheet("Summary")
        self._write_title(ws, f"As of {to_excel_datetime(as_of):%Y-%m-%d %H:%M} UTC")
        self._write_headers(ws, ["Metric", "Value"])
        ws.column_dimensions["A"].width = 26
        ws.column_dimensions["B"].width = 30

        summary = summary_df.iloc[0]
        labels = [
            ("schedules", "Schedules"),
            ("total_committed", "Total Committed"),
            ("total_released", "Total Released"),
            ("total_claimed", "Total Claimed"),
            ("total_claimable", "Total Claimable"),
            ("outstanding_obligation", "Outstanding Obligation"),
            ("custody_balance", "Custody Balance"),
            ("custody_surplus", "Custody Surplus"),
        ]
        row = HEADER_ROW + 1
        for key, label in labels:
            ws.cell(row=row, column=1, value=label).border = self.thin_border
            if key == "schedules":
                cell = ws.cell(row=row, column=2, value=int(summary[key]))
            else:
                cell = ws.cell(row=row, column=2, value=self.display_amount(int(summary[key])))
                cell.number_format = self.amount_format
            cell.border = self.thin_border
            row += 1
