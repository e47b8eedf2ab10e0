# utils/pdf_utils.py
from io import BytesIO

from loguru import logger
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from models.bulletin_model import StudentBulletin
from utils.formatting import (
    clean_observation,
    format_birth_date,
    format_credits,
    format_general_average,
    format_grade,
)

FONT_REGULAR = "Times-Roman"
FONT_BOLD = "Times-Bold"
HEADER_COLOR = colors.Color(0.04, 0.36, 0.51)  # #0A5D81

MARGIN = 50
LINE_HEIGHT = 20
COL_SUBJECT = MARGIN
COL_GRADE = MARGIN + 250
COL_CREDITS = MARGIN + 325


def wrap_text(text, font_name, font_size, max_width):
    """Greedy word wrap using the font's real glyph widths."""
    lines = []
    line = ""
    for word in text.split():
        candidate = f"{line} {word}" if line else word
        if pdfmetrics.stringWidth(candidate, font_name, font_size) > max_width and line:
            lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


class BulletinCanvas:
    """Keeps track of the write cursor and breaks pages when it runs out."""

    def __init__(self, buffer):
        self.c = canvas.Canvas(buffer, pagesize=A4)
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def text(self, x, value, size=10, bold=False, color=colors.black):
        self.c.setFont(FONT_BOLD if bold else FONT_REGULAR, size)
        self.c.setFillColor(color)
        self.c.drawString(x, self.y, value)

    def line(self, value, size=10, bold=False, color=colors.black, advance=1.0):
        self.text(MARGIN, value, size=size, bold=bold, color=color)
        self.down(advance)

    def down(self, lines=1.0):
        self.y -= LINE_HEIGHT * lines
        if self.y < MARGIN:
            self.new_page()

    def rule(self, offset=5, thickness=1):
        self.c.setLineWidth(thickness)
        self.c.setStrokeColor(colors.black)
        self.c.line(MARGIN, self.y + offset, self.width - MARGIN, self.y + offset)

    def new_page(self):
        self.c.showPage()
        self.y = self.height - MARGIN

    def save(self):
        self.c.save()


def _draw_identity(page, bulletin, school_name):
    page.line(school_name, size=16, bold=True, color=HEADER_COLOR, advance=1.5)
    page.line(f"BULLETIN DE NOTES - {bulletin.period}", size=14, bold=True, advance=2)
    page.line(f"Étudiant: {bulletin.last_name} {bulletin.first_name}", size=12, bold=True)

    birth_date = format_birth_date(bulletin.birth_date)
    if birth_date:
        page.line(f"Date de naissance: {birth_date}")

    page.line(f"Code étudiant: {bulletin.student_id}")

    group = bulletin.group
    if group:
        extended = group.get("ETENDU_GROUPE")
        label = f"{group.get('NOM_GROUPE', '')}{f' - {extended}' if extended else ''}"
        page.line(f"Groupe: {label}")

    if bulletin.campus:
        page.line(f"Campus: {bulletin.campus.get('NOM_SITE', '')}")

    if group and group.get("NOM_FORMATION"):
        page.line(f"Formation: {group['NOM_FORMATION']}", advance=2)
    else:
        page.down()


def _draw_grades(page, bulletin):
    page.text(COL_SUBJECT, "Matière", size=12, bold=True)
    page.text(COL_GRADE, "Note", size=12, bold=True)
    page.text(COL_CREDITS, "ECTS", size=12, bold=True)
    page.down()
    page.rule()
    page.down(0.5)

    for grade in bulletin.grades:
        code = str(grade.get("CODE_MATIERE", ""))
        is_unit = code in bulletin.unit_codes
        page.text(COL_SUBJECT, str(grade.get("NOM_MATIERE", "")), bold=is_unit)
        page.text(COL_GRADE, format_grade(grade.get("MOYENNE")), bold=is_unit)
        page.text(COL_CREDITS, format_credits(bulletin.credits.get(code, 0)), bold=is_unit)
        page.down()


def _draw_absences(page, bulletin):
    summary = bulletin.absences
    if summary is None:
        return
    page.line("Absences:", size=12, bold=True)
    page.line(f"Absences justifiées: {summary.justified_duration}")
    page.line(f"Absences non justifiées: {summary.unjustified_duration}")
    page.line(f"Retards: {summary.late_duration}", advance=2)


def _draw_observation(page, bulletin):
    if bulletin.observation is None:
        return
    page.line("Observations:", size=12, bold=True)
    text = clean_observation(bulletin.observation)
    for line in wrap_text(text, FONT_REGULAR, 10, page.width - 2 * MARGIN):
        page.line(line)


def create_student_pdf(bulletin: StudentBulletin, school_name: str) -> bytes:
    """Draw one student's transcript and return the PDF bytes."""
    buffer = BytesIO()
    page = BulletinCanvas(buffer)

    _draw_identity(page, bulletin, school_name)
    _draw_grades(page, bulletin)

    page.line(format_general_average(bulletin.general_average), size=12, bold=True, advance=2)

    _draw_absences(page, bulletin)
    _draw_observation(page, bulletin)

    page.save()
    logger.debug("PDF drawn for {} ({} bytes)", bulletin.student_id, buffer.tell())
    return buffer.getvalue()
