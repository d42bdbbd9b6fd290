from datetime import date, timedelta
from io import BytesIO
from typing import Sequence, Tuple
from docx import Document
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement, ns
from docx.shared import Inches, Pt

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

FONT_NAME = "맑은 고딕"
HEADER_FILL = "F3F4F6"
BORDER_COLOR = "BFDBFE"

# cell padding in twips
TEXT_CELL_MARGIN = 120
BULLET_CELL_MARGIN = 100


# ------------------ DATES ------------------

def week_bounds(selected: date) -> Tuple[date, date]:
    """Monday and Friday of the week containing ``selected``."""
    monday = selected - timedelta(days=selected.weekday())
    return monday, monday + timedelta(days=4)


def week_number(selected: date) -> int:
    # Weeks start on Monday and week 1 is the one holding 1 January, so the
    # last days of December can already belong to week 1 of the next year.
    monday, _ = week_bounds(selected)
    next_year_first_monday, _ = week_bounds(date(selected.year + 1, 1, 1))
    if monday >= next_year_first_monday:
        return 1
    year_first_monday, _ = week_bounds(date(selected.year, 1, 1))
    return (monday - year_first_monday).days // 7 + 1


def report_title(selected: date) -> str:
    start, friday = week_bounds(selected)
    return (
        f"{selected.year} 년 {selected.month} 월 {week_number(selected)} 주차 "
        f"{start.month} 월 {start.day} 일부터 {friday.month} 월 {friday.day} 일까지"
    )


def report_filename(selected: date) -> str:
    start, _ = week_bounds(selected)
    return f"주간보고_{start:%Y%m%d}.docx"


def header_labels(selected: date) -> list:
    start, friday = week_bounds(selected)
    prev_start, prev_end = start - timedelta(days=7), start - timedelta(days=3)
    return [
        "본부 및 팀",
        "프로젝트",
        f"전주 진행사항\n({prev_start:%m/%d}~{prev_end:%m/%d})",
        f"금주 진행사항\n({start:%m/%d}~{friday:%m/%d})",
        "비고",
    ]


# ------------------ HELPERS ------------------

def shade_cell(cell, fill: str):
    tc_pr = cell._tc.get_or_add_tcPr()
    shd = OxmlElement("w:shd")
    shd.set(ns.qn("w:val"), "clear")
    shd.set(ns.qn("w:color"), "auto")
    shd.set(ns.qn("w:fill"), fill)
    tc_pr.append(shd)


def set_cell_margins(cell, twips: int):
    tc_pr = cell._tc.get_or_add_tcPr()
    margins = OxmlElement("w:tcMar")
    for edge in ("top", "left", "bottom", "right"):
        element = OxmlElement(f"w:{edge}")
        element.set(ns.qn("w:w"), str(twips))
        element.set(ns.qn("w:type"), "dxa")
        margins.append(element)
    tc_pr.append(margins)


def set_full_width(table):
    tbl_w = table._tbl.tblPr.find(ns.qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        table._tbl.tblPr.append(tbl_w)
    # pct widths are in fiftieths of a percent
    tbl_w.set(ns.qn("w:type"), "pct")
    tbl_w.set(ns.qn("w:w"), "5000")


def set_table_borders(table, color: str):
    tbl_pr = table._tbl.tblPr
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        element = OxmlElement(f"w:{edge}")
        element.set(ns.qn("w:val"), "single")
        element.set(ns.qn("w:sz"), "4")
        element.set(ns.qn("w:space"), "0")
        element.set(ns.qn("w:color"), color)
        borders.append(element)
    # tblBorders must precede tblLook inside tblPr
    look = tbl_pr.find(ns.qn("w:tblLook"))
    if look is not None:
        look.addprevious(borders)
    else:
        tbl_pr.append(borders)


def fill_text_cell(cell, text, bold=False, fill=None):
    if fill:
        shade_cell(cell, fill)
    set_cell_margins(cell, TEXT_CELL_MARGIN)
    p = cell.paragraphs[0]
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(text or "")
    run.bold = bold
    run.font.size = Pt(11)
    run.font.name = FONT_NAME
    run._element.rPr.rFonts.set(ns.qn("w:eastAsia"), FONT_NAME)
    cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER


def fill_bullet_cell(cell, text):
    """One bullet per non-blank line of ``text``."""
    lines = [line for line in (text or "").split("\n") if line.strip()]
    set_cell_margins(cell, BULLET_CELL_MARGIN)
    cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    if not lines:
        return
    first = cell.paragraphs[0]
    first.style = "List Bullet"
    first.add_run(lines[0])
    for line in lines[1:]:
        cell.add_paragraph(line, style="List Bullet")


# ------------------ DOCUMENT ------------------

def build_weekly_report(selected: date, items: Sequence) -> bytes:
    """Render a week's items as a .docx and return the file's bytes.

    ``items`` are anything with the report item attributes (ORM rows or
    request models). The store is never touched.
    """
    doc = Document()

    for section in doc.sections:
        section.top_margin = Inches(0.5)
        section.bottom_margin = Inches(0.5)
        section.left_margin = Inches(0.5)
        section.right_margin = Inches(0.5)

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.LEFT
    title.paragraph_format.space_after = Pt(15)
    title_run = title.add_run(report_title(selected))
    title_run.bold = True
    title_run.font.size = Pt(16)

    table = doc.add_table(rows=1, cols=5)
    table.style = "Table Grid"
    set_full_width(table)
    set_table_borders(table, BORDER_COLOR)

    for cell, label in zip(table.rows[0].cells, header_labels(selected)):
        fill_text_cell(cell, label, bold=True, fill=HEADER_FILL)

    for item in items:
        row = table.add_row().cells
        fill_text_cell(row[0], item.division)
        fill_text_cell(row[1], item.project)
        fill_bullet_cell(row[2], item.prev_progress)
        fill_bullet_cell(row[3], item.curr_progress)
        fill_text_cell(row[4], item.remarks)

    if not items:
        for cell in table.add_row().cells:
            fill_text_cell(cell, "")

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
