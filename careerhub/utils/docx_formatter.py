"""
DOCX building helpers.
Handles font families, sizes, colors, bold, italic, alignment and spacing
for generated resumes and cover letters.
"""

import io
from typing import Any, Dict, Iterable, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from careerhub.utils.logger import get_logger

logger = get_logger(__name__)


def parse_hex_color(value: Optional[str], default: str = "#222222") -> RGBColor:
    """Convert ``#rrggbb`` (or ``#rgb``) to an RGBColor."""
    text = (value or default).lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    try:
        return RGBColor.from_string(text.upper())
    except ValueError:
        logger.warning(f"⚠️ Invalid color {value!r}, using {default}")
        return RGBColor.from_string(default.lstrip("#").upper())


class DocxFormatter:
    """Build consistently formatted DOCX documents."""

    def __init__(
        self,
        font_family: str = "Arial",
        font_size_pt: int = 11,
        primary_color: str = "#2563eb",
        margin_inches: float = 0.8,
    ):
        self.font_family = font_family
        self.font_size_pt = font_size_pt
        self.primary_color = parse_hex_color(primary_color)
        self.margin_inches = margin_inches

    def new_document(self) -> Document:
        doc = Document()
        normal = doc.styles["Normal"]
        normal.font.name = self.font_family
        normal.font.size = Pt(self.font_size_pt)

        for section in doc.sections:
            section.top_margin = Inches(self.margin_inches)
            section.bottom_margin = Inches(self.margin_inches)
            section.left_margin = Inches(self.margin_inches)
            section.right_margin = Inches(self.margin_inches)
        return doc

    @staticmethod
    def apply_run_format(run, run_format: Dict[str, Any]):
        """
        Apply formatting to a run.

        Args:
            run: Target run
            run_format: Run formatting info (font_name, font_size, bold, italic, underline, color)
        """
        if run_format.get('font_name'):
            run.font.name = run_format['font_name']
        if run_format.get('font_size'):
            run.font.size = run_format['font_size']
        if run_format.get('bold') is not None:
            run.font.bold = run_format['bold']
        if run_format.get('italic') is not None:
            run.font.italic = run_format['italic']
        if run_format.get('underline') is not None:
            run.font.underline = run_format['underline']
        if run_format.get('color'):
            run.font.color.rgb = run_format['color']

    def add_paragraph(
        self,
        doc: Document,
        text: str,
        bold: bool = False,
        italic: bool = False,
        size_pt: Optional[float] = None,
        color: Optional[RGBColor] = None,
        align: Optional[int] = None,
        space_after_pt: float = 4,
        font_name: Optional[str] = None,
    ):
        paragraph = doc.add_paragraph()
        run = paragraph.add_run(text)
        self.apply_run_format(run, {
            'font_name': font_name or self.font_family,
            'font_size': Pt(size_pt or self.font_size_pt),
            'bold': bold,
            'italic': italic,
            'color': color,
        })
        if align is not None:
            paragraph.alignment = align
        paragraph.paragraph_format.space_after = Pt(space_after_pt)
        return paragraph

    def add_name_heading(self, doc: Document, name: str, style: str = "classic"):
        """Large name line at the top of the document, laid out per template style."""
        align = WD_ALIGN_PARAGRAPH.CENTER if style in ("classic", "entry") else WD_ALIGN_PARAGRAPH.LEFT
        color = self.primary_color if style in ("modern", "creative") else None
        size = 16 if style == "entry" else 20
        return self.add_paragraph(doc, name, bold=True, size_pt=size, color=color, align=align, space_after_pt=2)

    def add_section_title(self, doc: Document, title: str, style: str = "classic"):
        text = title.upper() if style in ("classic", "entry") else title
        paragraph = self.add_paragraph(
            doc,
            text,
            bold=True,
            italic=style == "creative",
            size_pt=self.font_size_pt + 2,
            color=self.primary_color,
            space_after_pt=2,
        )
        paragraph.paragraph_format.space_before = Pt(10)
        return paragraph

    def add_bullets(self, doc: Document, lines: Iterable[str]):
        for line in lines:
            line = line.strip().lstrip("•-* ").strip()
            if not line:
                continue
            paragraph = doc.add_paragraph(style="List Bullet")
            run = paragraph.add_run(line)
            self.apply_run_format(run, {'font_name': self.font_family, 'font_size': Pt(self.font_size_pt)})

    @staticmethod
    def to_bytes(doc: Document) -> bytes:
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()
