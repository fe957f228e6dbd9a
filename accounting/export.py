"""Excel renditions of the profit and loss reports."""

from __future__ import annotations

import io
import logging

from openpyxl import Workbook
from openpyxl.styles import Font

from .reports import DailyReport, PeriodReport

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_BOLD = Font(bold=True)


def _header(sheet, values):
    sheet.append(values)
    for cell in sheet[sheet.max_row]:
        cell.font = _BOLD


def _summary_sheet(sheet, report) -> None:
    sheet.title = "Summary"
    _header(sheet, ["Field", "Value"])
    if isinstance(report, DailyReport):
        sheet.append(["Date", report.date])
    else:
        sheet.append(["Start date", report.start_date])
        sheet.append(["End date", report.end_date])
    sheet.append(["Total production", report.production.total_quantity])
    sheet.append(["Sales count", report.sales.count])
    sheet.append(["Sold quantity", report.sales.total_quantity])
    sheet.append(["Sales amount", float(report.sales.total_amount)])
    sheet.append(["Total costs", float(report.costs.total_amount)])
    sheet.append(["Profit", float(report.profit)])


def _production_sheet(workbook, report) -> None:
    sheet = workbook.create_sheet("Production")
    _header(sheet, ["Product", "Quantity"])
    for entry in report.production.by_product:
        sheet.append([entry.product_name, entry.quantity])


def _costs_sheet(workbook, report) -> None:
    sheet = workbook.create_sheet("Costs")
    _header(sheet, ["Type", "Period", "Period value", "Amount", "Description"])
    for cost in report.costs.costs:
        sheet.append(
            [
                cost.label,
                cost.period_type,
                cost.period_value,
                float(cost.amount),
                cost.description,
            ]
        )
    sheet.append([])
    _header(sheet, ["Type", "Total"])
    for entry in report.costs.by_type:
        sheet.append([entry.type_label or entry.type, float(entry.amount)])


def _profit_sheet(workbook, report: PeriodReport) -> None:
    sheet = workbook.create_sheet("Profit by product")
    _header(sheet, ["Product", "Revenue", "Cost", "Profit", "Margin %"])
    for entry in report.profit_by_product:
        sheet.append(
            [
                entry.product_name,
                float(entry.revenue),
                float(entry.cost),
                float(entry.profit),
                round(float(entry.profit_margin), 2),
            ]
        )


def build_report_workbook(report) -> Workbook:
    """Workbook with a summary sheet plus one sheet per report section."""

    workbook = Workbook()
    _summary_sheet(workbook.active, report)
    _production_sheet(workbook, report)
    _costs_sheet(workbook, report)
    if isinstance(report, PeriodReport):
        _profit_sheet(workbook, report)
    return workbook


def report_filename(report) -> str:
    title = report.title.replace("/", "-").replace(" ", "")
    return f"{report.kind}-report-{title}.xlsx"


def report_to_xlsx_bytes(report) -> io.BytesIO:
    workbook = build_report_workbook(report)
    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    logger.debug("Rendered %s report workbook %s", report.kind, report.title)
    return output
