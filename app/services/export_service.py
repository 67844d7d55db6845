from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

_LEDGER_COLUMNS = (
    ("Date", "entry_date"),
    ("Time", "entry_time"),
    ("Quantity Added", "quantity_added"),
    ("Previous Stock", "previous_stock"),
    ("New Stock", "new_stock"),
    ("Entered By", "entered_by"),
    ("Notes", "notes"),
)
_HEADER_FILL = PatternFill(start_color="FF1F4E78", end_color="FF1F4E78", fill_type="solid")
_QUANTITY_COLUMN = 3


def build_ledger_workbook(product: dict, entries: list[dict]) -> Workbook:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Stock Entries"

    title = "{} ({})".format(product.get("name") or "Product", product.get("item_code") or product.get("id"))
    worksheet.append([title])
    worksheet.cell(row=1, column=1).font = Font(bold=True, size=13)
    worksheet.append([])

    header_row = 3
    worksheet.append([label for label, _ in _LEDGER_COLUMNS])
    for col in range(1, len(_LEDGER_COLUMNS) + 1):
        cell = worksheet.cell(row=header_row, column=col)
        cell.font = Font(bold=True, color="FFFFFFFF")
        cell.fill = _HEADER_FILL

    for entry in entries:
        worksheet.append([entry.get(key) for _, key in _LEDGER_COLUMNS])

    last_data_row = header_row + len(entries)
    total_row = last_data_row + 1
    quantity_letter = get_column_letter(_QUANTITY_COLUMN)
    worksheet.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    if entries:
        total_value = "=SUM({0}{1}:{0}{2})".format(quantity_letter, header_row + 1, last_data_row)
    else:
        total_value = 0
    worksheet.cell(row=total_row, column=_QUANTITY_COLUMN, value=total_value).font = Font(bold=True)

    worksheet.freeze_panes = worksheet.cell(row=header_row + 1, column=1)
    for index, (label, key) in enumerate(_LEDGER_COLUMNS, start=1):
        widest = max([len(label)] + [len(str(entry.get(key) or "")) for entry in entries])
        worksheet.column_dimensions[get_column_letter(index)].width = min(widest + 2, 60)

    return workbook


def export_ledger_xlsx(product: dict, entries: list[dict]) -> bytes:
    buffer = BytesIO()
    build_ledger_workbook(product, entries).save(buffer)
    return buffer.getvalue()


__all__ = ["build_ledger_workbook", "export_ledger_xlsx"]
