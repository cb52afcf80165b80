from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Iterable, Sequence

import pandas as pd
from fastapi.responses import StreamingResponse

EXPORT_COLUMNS = [
    "chassis_number",
    "product_line",
    "model",
    "leakage_type",
    "severity",
    "status",
    "tester",
    "created_at",
]

EXPORT_FORMATS = ("csv", "xlsx", "pdf")


def inspections_dataframe(rows: Iterable[Sequence]) -> pd.DataFrame:
    """
    Flatten export rows into a DataFrame with a fixed column order.

    Each row is (chassis, product line code, model code, leakage code,
    severity, status, tester name, created_at).
    """
    data = []
    for chassis, pl_code, model_code, lt_code, severity, status, tester, created_at in rows:
        data.append(
            {
                "chassis_number": chassis,
                "product_line": pl_code,
                "model": model_code,
                "leakage_type": lt_code,
                "severity": severity,
                "status": status,
                "tester": tester,
                "created_at": created_at.isoformat() if created_at else None,
            }
        )
    return pd.DataFrame(data, columns=EXPORT_COLUMNS)


def _pdf_bytes(df: pd.DataFrame, title: str) -> io.BytesIO:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    elements: list = [Paragraph(f"{title} ({stamp})", styles["Title"])]

    data = [list(df.columns)] + df.fillna("").astype(str).values.tolist()
    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    elements.append(table)
    doc.build(elements)
    buffer.seek(0)
    return buffer


# PUBLIC_INTERFACE
def export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> StreamingResponse:
    """
    Serialize a DataFrame as csv, xlsx or pdf and stream it as an attachment.

    Unknown formats fall back to csv.
    """
    export_format = (export_format or "csv").lower()

    if export_format == "xlsx":
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Inspections")
        buffer.seek(0)
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'},
        )

    if export_format == "pdf":
        title = filename_base.replace("_", " ").title()
        return StreamingResponse(
            _pdf_bytes(df, title),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename_base}.pdf"'},
        )

    text = io.StringIO()
    df.to_csv(text, index=False)
    text.seek(0)
    return StreamingResponse(
        text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename_base}.csv"'},
    )
