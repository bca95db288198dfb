# export.py: planilhas e PDF das tabelas de ranking
from datetime import datetime
from io import BytesIO

import pandas as pd

# --- PDF (ReportLab) opcional ---
try:
    from reportlab.lib.pagesizes import A4
    from reportlab.lib import colors
    from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
    from reportlab.lib.styles import getSampleStyleSheet
    HAS_RL = True
except ImportError:
    HAS_RL = False


def to_xlsx_bytes(df: pd.DataFrame, sheet_name="Planilha"):
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as w:
        df.to_excel(w, index=False, sheet_name=sheet_name[:31])
    return buf.getvalue()


def _pos_color_for_pdf(pos_num:int):
    if pos_num == 1: return colors.HexColor("#ca8a04")  # ouro
    if pos_num == 2: return colors.HexColor("#6b7280")  # prata
    if pos_num == 3: return colors.HexColor("#b45309")  # bronze
    return colors.HexColor("#111827")


def build_ranking_pdf_bytes(title:str, subtitle:str, sections) -> bytes:
    """
    sections: lista de (cabeçalho, DataFrame). DataFrames com coluna 'Posição'
    ganham cor de pódio.
    """
    if not HAS_RL:
        return b""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=24, rightMargin=24, topMargin=28, bottomMargin=28)
    styles = getSampleStyleSheet()
    story = [Paragraph(title, styles["Title"])]
    if subtitle:
        story.append(Paragraph(subtitle, styles["Heading3"]))
    story.append(Spacer(1, 8))

    for header, df in sections:
        story.append(Spacer(1, 6))
        story.append(Paragraph(header, styles["Heading2"]))
        if df is None or df.empty:
            story.append(Paragraph("Sem dados.", styles["Normal"]))
            continue

        data = [list(df.columns)] + [[str(x) for x in r] for r in df.to_numpy()]
        tbl = Table(data, repeatRows=1)
        cmds = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
            ("TEXTCOLOR",  (0, 0), (-1, 0), colors.HexColor("#111827")),
            ("FONTNAME",   (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ALIGN",      (0, 0), (-1, 0), "CENTER"),
            ("GRID",       (0, 0), (-1, -1), 0.25, colors.HexColor("#e5e7eb")),
            ("FONTSIZE",   (0, 0), (-1, -1), 9),
            ("LEFTPADDING",(0, 0), (-1, -1), 6),
            ("RIGHTPADDING",(0, 0), (-1, -1), 6),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#fafafa")]),
        ]
        if "Posição" in df.columns:
            pos_col_idx = df.columns.get_loc("Posição")
            for ridx in range(1, len(data)):
                digits = str(data[ridx][pos_col_idx]).replace("º", "").strip()
                if digits.isdigit():
                    cell = (pos_col_idx, ridx)
                    cmds.append(("TEXTCOLOR", cell, cell, _pos_color_for_pdf(int(digits))))
                    cmds.append(("FONTNAME",  cell, cell, "Helvetica-Bold"))
        tbl.setStyle(TableStyle(cmds))
        story.append(tbl)
        story.append(Spacer(1, 10))

    gen = datetime.now().strftime("%d/%m/%Y %H:%M")
    story.append(Paragraph(f"Geração: {gen}", styles["Normal"]))
    doc.build(story)
    return buf.getvalue()
