import io
from typing import Any, Dict, List, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_COLUMN_WIDTH = 60


def to_xlsx(rows: List[Dict[str, Any]], columns: Sequence[str], sheet_name: str) -> bytes:
    """Serialize rows to a single-sheet xlsx workbook with a header row"""
    frame = pd.DataFrame(rows, columns=list(columns))
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
        worksheet = writer.sheets[sheet_name]
        for index, column in enumerate(frame.columns, start=1):
            widest = max([len(str(column))] + [len(str(value)) for value in frame[column]])
            worksheet.column_dimensions[get_column_letter(index)].width = min(widest + 2, MAX_COLUMN_WIDTH)
    return buffer.getvalue()
