"""
Export formatting for resumes, cover letters and the interview response library.

Resume sections are always emitted in the same order (header, summary,
experience, education, skills, certifications, projects); a section is
written only when it has content and the optional section configuration
enables it.
"""

import io
import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from docx.enum.text import WD_ALIGN_PARAGRAPH
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from careerhub.config.settings import HEX_COLOR_PATTERN, ExportSettings
from careerhub.models.documents import CoverLetterStyle, ExportFormat, TemplateStyle
from careerhub.services.statistics import parse_datetime
from careerhub.utils.docx_formatter import DocxFormatter
from careerhub.utils.file_utils import save_bytes
from careerhub.utils.logger import get_logger
from careerhub.utils.paths import get_export_path, safe_name
from careerhub.utils.sanitize import escape_text, sanitize_filename


logger = get_logger(__name__)

RULE = "-" * 50

SECTION_ORDER = ["summary", "experience", "education", "skills", "certifications", "projects"]

SECTION_TITLES = {
    "summary": "Professional Summary",
    "experience": "Work Experience",
    "education": "Education",
    "skills": "Skills",
    "certifications": "Certifications",
    "projects": "Projects",
}

MIME_TYPES = {
    ExportFormat.TEXT: "text/plain",
    ExportFormat.HTML: "text/html",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.JSON: "application/json",
}

# reportlab base fonts per cover letter style
COVER_LETTER_FONTS = {
    CoverLetterStyle.PROFESSIONAL: ("Helvetica", "Helvetica-Bold"),
    CoverLetterStyle.MODERN: ("Helvetica", "Helvetica-Bold"),
    CoverLetterStyle.CLASSIC: ("Times-Roman", "Times-Bold"),
    CoverLetterStyle.MINIMAL: ("Courier", "Courier-Bold"),
}

DOCX_FONTS = {
    CoverLetterStyle.PROFESSIONAL: "Arial",
    CoverLetterStyle.MODERN: "Arial",
    CoverLetterStyle.CLASSIC: "Times New Roman",
    CoverLetterStyle.MINIMAL: "Courier New",
}

MODERN_ACCENT = "#3b82f6"

HEX_COLOR = re.compile(HEX_COLOR_PATTERN)


def _format_date(value: Any) -> str:
    parsed = parse_datetime(value) if value else None
    return parsed.strftime("%b %Y") if parsed else ""


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


def long_date(today: Optional[date] = None) -> str:
    """Letter date in the form ``January 5, 2025``."""
    today = today or date.today()
    return f"{today.strftime('%B')} {today.day}, {today.year}"


def format_resume_data(resume_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize profile rows into the flat structure every resume format renders.

    Args:
        resume_data: Dict with ``profile``, ``summary`` and the section row lists
            (``employment``, ``education``, ``skills``, ``certifications``, ``projects``)

    Returns:
        Dict with personal_info, summary, experience, education, skills,
        certifications and projects
    """
    profile = resume_data.get("profile") or {}

    experience = []
    for job in resume_data.get("employment") or []:
        end = "Present" if job.get("is_current") else _format_date(job.get("end_date"))
        start = _format_date(job.get("start_date"))
        experience.append({
            "job_title": job.get("job_title", ""),
            "company": job.get("company_name", ""),
            "location": job.get("location") or "",
            "dates": f"{start} - {end}" if start or end else "",
            "description": job.get("job_description") or "",
        })

    education = []
    for edu in resume_data.get("education") or []:
        graduation = parse_datetime(edu.get("graduation_date")) if edu.get("graduation_date") else None
        education.append({
            "degree": f"{edu.get('degree_type', '')} in {edu.get('field_of_study', '')}".strip(),
            "institution": edu.get("institution_name", ""),
            "year": str(graduation.year) if graduation else "Present",
            "gpa": edu.get("gpa") if edu.get("show_gpa", True) and edu.get("gpa") else None,
        })

    skills = [
        s if isinstance(s, str) else s.get("skill_name", "")
        for s in resume_data.get("skills") or []
    ]

    certifications = [
        {
            "name": cert.get("certification_name", ""),
            "issuer": cert.get("issuing_organization", ""),
            "date": _format_date(cert.get("date_earned")),
        }
        for cert in resume_data.get("certifications") or []
    ]

    projects = [
        {
            "name": proj.get("project_name", ""),
            "description": proj.get("description") or "",
            "technologies": _as_list(proj.get("technologies")),
            "url": proj.get("project_url") or "",
        }
        for proj in resume_data.get("projects") or []
    ]

    return {
        "personal_info": {
            "name": f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip(),
            "email": profile.get("email") or "",
            "phone": profile.get("phone") or "",
            "location": profile.get("location") or "",
            "headline": profile.get("headline") or "",
        },
        "summary": resume_data.get("summary") or "",
        "experience": experience,
        "education": education,
        "skills": [s for s in skills if s],
        "certifications": certifications,
        "projects": projects,
    }


def enabled_sections(sections: Optional[List[Dict[str, Any]]] = None) -> List[str]:
    """Section ids to render, in the fixed order; all of them when no configuration is given."""
    if not sections:
        return list(SECTION_ORDER)
    enabled = {s.get("id") for s in sections if s.get("enabled", True)}
    return [section for section in SECTION_ORDER if section in enabled]


def _present(data: Dict[str, Any], section: str) -> bool:
    return bool(data.get(section))


class ExportService:
    """Render and save resume, cover letter and response library exports."""

    def __init__(self, settings: Optional[ExportSettings] = None, exports_dir: Union[Path, str, None] = None):
        self.settings = settings or ExportSettings()
        self.exports_dir = exports_dir

    def _accent(self, primary_color: Optional[str]) -> str:
        """Accent color as ``#RRGGBB``; anything else is rejected before it reaches a style."""
        color = primary_color or self.settings.primary_color
        if not HEX_COLOR.fullmatch(color):
            raise ValueError(f"Invalid color {color!r}, expected #RRGGBB")
        return color

    # -- resume: text ------------------------------------------------------

    def resume_to_text(
        self,
        resume_data: Dict[str, Any],
        sections: Optional[List[Dict[str, Any]]] = None,
        include_watermark: Optional[bool] = None,
    ) -> str:
        data = format_resume_data(resume_data)
        info = data["personal_info"]
        watermark = self.settings.include_watermark if include_watermark is None else include_watermark

        lines = [info["name"].upper()]
        if info["headline"]:
            lines.append(info["headline"])
        contact = f"{info['email']} | {info['phone']}"
        if info["location"]:
            contact += f" | {info['location']}"
        lines.extend([contact, ""])

        for section in enabled_sections(sections):
            if not _present(data, section):
                continue
            lines.extend([SECTION_TITLES[section].upper(), RULE])

            if section == "summary":
                lines.extend([data["summary"], ""])
            elif section == "experience":
                for exp in data["experience"]:
                    lines.append(exp["job_title"])
                    lines.append(f"{exp['company']} | {exp['dates']}")
                    if exp["description"]:
                        lines.append(exp["description"])
                    lines.append("")
            elif section == "education":
                for edu in data["education"]:
                    lines.append(edu["degree"])
                    lines.append(f"{edu['institution']} | {edu['year']}")
                    if edu["gpa"]:
                        lines.append(f"GPA: {edu['gpa']}")
                    lines.append("")
            elif section == "skills":
                lines.extend([", ".join(data["skills"]), ""])
            elif section == "certifications":
                for cert in data["certifications"]:
                    lines.append(f"{cert['name']} - {cert['issuer']} ({cert['date']})")
                lines.append("")
            elif section == "projects":
                for proj in data["projects"]:
                    lines.append(proj["name"])
                    lines.append(proj["description"])
                    if proj["technologies"]:
                        lines.append(f"Technologies: {', '.join(proj['technologies'])}")
                    lines.append("")

        if watermark:
            lines.extend(["", RULE, self.settings.watermark_text])

        return "\n".join(lines) + "\n"

    # -- resume: html ------------------------------------------------------

    def resume_to_html(
        self,
        resume_data: Dict[str, Any],
        sections: Optional[List[Dict[str, Any]]] = None,
        include_watermark: Optional[bool] = None,
        primary_color: Optional[str] = None,
    ) -> str:
        """Standalone HTML document; every user supplied value is escaped."""
        data = format_resume_data(resume_data)
        info = data["personal_info"]
        watermark = self.settings.include_watermark if include_watermark is None else include_watermark
        color = escape_text(self._accent(primary_color))
        e = escape_text

        contact = " | ".join(e(v) for v in (info["email"], info["phone"], info["location"]) if v)
        parts = [
            '<header style="text-align:center;margin-bottom:16px;">',
            f'<h1 style="margin:0;font-size:28px;font-weight:bold;color:{color};">{e(info["name"])}</h1>',
        ]
        if info["headline"]:
            parts.append(f'<p style="margin:4px 0;font-size:16px;">{e(info["headline"])}</p>')
        parts.append(f'<p style="margin:4px 0;font-size:14px;color:#4b5563;">{contact}</p>')
        parts.append('</header>')

        for section in enabled_sections(sections):
            if not _present(data, section):
                continue
            parts.append('<section style="margin-bottom:16px;">')
            parts.append(
                f'<h2 style="margin:0 0 4px 0;font-size:16px;border-bottom:1px solid #e5e7eb;">'
                f'{SECTION_TITLES[section]}</h2>'
            )

            if section == "summary":
                parts.append(f'<p style="margin:0;font-size:14px;line-height:1.5;">{e(data["summary"])}</p>')
            elif section == "experience":
                for exp in data["experience"]:
                    parts.append('<div style="margin-bottom:12px;">')
                    parts.append(f'<div style="font-weight:600;">{e(exp["job_title"])}</div>')
                    parts.append(
                        f'<div style="font-size:13px;color:#4b5563;">{e(exp["company"])} | {e(exp["dates"])}</div>'
                    )
                    if exp["description"]:
                        parts.append(
                            f'<p style="margin:4px 0 0 0;font-size:14px;line-height:1.5;">{e(exp["description"])}</p>'
                        )
                    parts.append('</div>')
            elif section == "education":
                for edu in data["education"]:
                    gpa = f' &bull; GPA: {e(edu["gpa"])}' if edu["gpa"] else ''
                    parts.append('<div style="margin-bottom:8px;">')
                    parts.append(f'<div style="font-weight:600;">{e(edu["degree"])}</div>')
                    parts.append(
                        f'<div style="font-size:13px;color:#4b5563;">{e(edu["institution"])} | {e(edu["year"])}{gpa}</div>'
                    )
                    parts.append('</div>')
            elif section == "skills":
                parts.append(f'<p style="margin:0;font-size:14px;">{", ".join(e(s) for s in data["skills"])}</p>')
            elif section == "certifications":
                items = "".join(
                    f'<li>{e(c["name"])} - {e(c["issuer"])} ({e(c["date"])})</li>' for c in data["certifications"]
                )
                parts.append(f'<ul style="margin:0 0 0 16px;font-size:14px;">{items}</ul>')
            elif section == "projects":
                for proj in data["projects"]:
                    parts.append('<div style="margin-bottom:12px;">')
                    parts.append(f'<div style="font-weight:600;">{e(proj["name"])}</div>')
                    parts.append(
                        f'<p style="margin:4px 0 0 0;font-size:14px;line-height:1.5;">{e(proj["description"])}</p>'
                    )
                    parts.append('</div>')

            parts.append('</section>')

        if watermark:
            parts.append(
                '<footer style="margin-top:24px;font-size:11px;color:#9ca3af;text-align:center;">'
                f'{e(self.settings.watermark_text)}</footer>'
            )

        body = "\n".join(parts)
        title = e(f"{info['name']} - Resume")
        font = e(self.settings.font_family)
        return (
            '<!DOCTYPE html>\n<html lang="en">\n<head>\n<meta charset="utf-8" />\n'
            f'<title>{title}</title>\n'
            f'<style>body {{ font-family: {font}, sans-serif; margin: 32px; color: #111827; }}</style>\n'
            f'</head>\n<body>\n{body}\n</body>\n</html>\n'
        )

    # -- resume: docx ------------------------------------------------------

    def resume_to_docx(
        self,
        resume_data: Dict[str, Any],
        sections: Optional[List[Dict[str, Any]]] = None,
        template_style: Optional[str] = None,
        include_watermark: Optional[bool] = None,
        primary_color: Optional[str] = None,
    ) -> bytes:
        data = format_resume_data(resume_data)
        info = data["personal_info"]
        style = TemplateStyle(template_style or self.settings.default_template).value
        watermark = self.settings.include_watermark if include_watermark is None else include_watermark

        formatter = DocxFormatter(
            font_family=self.settings.font_family,
            font_size_pt=self.settings.font_size_pt,
            primary_color=self._accent(primary_color),
        )
        doc = formatter.new_document()
        center = WD_ALIGN_PARAGRAPH.CENTER if style in ("classic", "entry") else None

        formatter.add_name_heading(doc, info["name"], style=style)
        if info["headline"]:
            formatter.add_paragraph(doc, info["headline"], italic=style == "creative", align=center)
        contact = " | ".join(v for v in (info["email"], info["phone"], info["location"]) if v)
        if contact:
            formatter.add_paragraph(doc, contact, size_pt=formatter.font_size_pt - 1, align=center)

        for section in enabled_sections(sections):
            if not _present(data, section):
                continue
            formatter.add_section_title(doc, SECTION_TITLES[section], style=style)

            if section == "summary":
                formatter.add_paragraph(doc, data["summary"])
            elif section == "experience":
                for exp in data["experience"]:
                    formatter.add_paragraph(doc, exp["job_title"], bold=True, space_after_pt=0)
                    formatter.add_paragraph(doc, f"{exp['company']} | {exp['dates']}", italic=True)
                    if exp["description"]:
                        formatter.add_bullets(doc, exp["description"].splitlines())
            elif section == "education":
                for edu in data["education"]:
                    formatter.add_paragraph(doc, edu["degree"], bold=True, space_after_pt=0)
                    line = f"{edu['institution']} | {edu['year']}"
                    if edu["gpa"]:
                        line += f" | GPA: {edu['gpa']}"
                    formatter.add_paragraph(doc, line)
            elif section == "skills":
                formatter.add_paragraph(doc, ", ".join(data["skills"]))
            elif section == "certifications":
                formatter.add_bullets(
                    doc, [f"{c['name']} - {c['issuer']} ({c['date']})" for c in data["certifications"]]
                )
            elif section == "projects":
                for proj in data["projects"]:
                    formatter.add_paragraph(doc, proj["name"], bold=True, space_after_pt=0)
                    formatter.add_paragraph(doc, proj["description"])
                    if proj["technologies"]:
                        formatter.add_paragraph(doc, f"Technologies: {', '.join(proj['technologies'])}", italic=True)

        if watermark:
            formatter.add_paragraph(
                doc, self.settings.watermark_text, size_pt=8, align=WD_ALIGN_PARAGRAPH.CENTER
            )

        return formatter.to_bytes(doc)

    # -- resume: pdf -------------------------------------------------------

    def _pdf_styles(self, primary_color: Optional[str] = None) -> Dict[str, ParagraphStyle]:
        styles = getSampleStyleSheet()
        accent = colors.HexColor(self._accent(primary_color))
        size = self.settings.font_size_pt
        return {
            "name": ParagraphStyle("ResumeName", parent=styles["Title"], fontSize=20, leading=24,
                                   textColor=accent, spaceAfter=4),
            "centered": ParagraphStyle("Centered", parent=styles["Normal"], fontSize=size,
                                       leading=size + 3, alignment=TA_CENTER),
            "section": ParagraphStyle("Section", parent=styles["Heading2"], fontSize=size + 2,
                                      textColor=accent, spaceBefore=10, spaceAfter=4),
            "body": ParagraphStyle("Body", parent=styles["Normal"], fontSize=size, leading=size + 3,
                                   alignment=TA_LEFT, spaceAfter=4),
            "bold": ParagraphStyle("BodyBold", parent=styles["Normal"], fontName="Helvetica-Bold",
                                   fontSize=size, leading=size + 3),
            "small": ParagraphStyle("Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey,
                                    alignment=TA_CENTER),
        }

    def resume_to_pdf(
        self,
        resume_data: Dict[str, Any],
        sections: Optional[List[Dict[str, Any]]] = None,
        include_watermark: Optional[bool] = None,
        primary_color: Optional[str] = None,
    ) -> bytes:
        """Render the resume with reportlab; the flowable layout handles page breaks."""
        data = format_resume_data(resume_data)
        info = data["personal_info"]
        watermark = self.settings.include_watermark if include_watermark is None else include_watermark
        styles = self._pdf_styles(primary_color)
        e = escape_text

        story = [Paragraph(e(info["name"]), styles["name"])]
        if info["headline"]:
            story.append(Paragraph(e(info["headline"]), styles["centered"]))
        contact = " | ".join(e(v) for v in (info["email"], info["phone"], info["location"]) if v)
        if contact:
            story.append(Paragraph(contact, styles["centered"]))
        story.append(Spacer(1, 8))

        for section in enabled_sections(sections):
            if not _present(data, section):
                continue
            story.append(Paragraph(SECTION_TITLES[section], styles["section"]))
            story.append(HRFlowable(width="100%", thickness=0.5, color=colors.lightgrey, spaceAfter=4))

            if section == "summary":
                story.append(Paragraph(e(data["summary"]), styles["body"]))
            elif section == "experience":
                for exp in data["experience"]:
                    story.append(Paragraph(e(exp["job_title"]), styles["bold"]))
                    story.append(Paragraph(f"{e(exp['company'])} | {e(exp['dates'])}", styles["body"]))
                    if exp["description"]:
                        story.append(Paragraph(e(exp["description"]).replace("\n", "<br/>"), styles["body"]))
            elif section == "education":
                for edu in data["education"]:
                    line = f"{e(edu['institution'])} | {e(edu['year'])}"
                    if edu["gpa"]:
                        line += f" | GPA: {e(edu['gpa'])}"
                    story.append(Paragraph(e(edu["degree"]), styles["bold"]))
                    story.append(Paragraph(line, styles["body"]))
            elif section == "skills":
                story.append(Paragraph(", ".join(e(s) for s in data["skills"]), styles["body"]))
            elif section == "certifications":
                for cert in data["certifications"]:
                    story.append(Paragraph(
                        f"{e(cert['name'])} - {e(cert['issuer'])} ({e(cert['date'])})", styles["body"]
                    ))
            elif section == "projects":
                for proj in data["projects"]:
                    story.append(Paragraph(e(proj["name"]), styles["bold"]))
                    story.append(Paragraph(e(proj["description"]), styles["body"]))
                    if proj["technologies"]:
                        story.append(Paragraph(
                            f"Technologies: {e(', '.join(proj['technologies']))}", styles["body"]
                        ))

        if watermark:
            story.append(Spacer(1, 16))
            story.append(Paragraph(e(self.settings.watermark_text), styles["small"]))

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            rightMargin=0.75 * inch,
            title=f"{info['name']} - Resume",
        )
        doc.build(story)
        return buffer.getvalue()

    def export_resume(
        self,
        resume_data: Dict[str, Any],
        export_format: str,
        filename: Optional[str] = None,
        sections: Optional[List[Dict[str, Any]]] = None,
        template_style: Optional[str] = None,
        include_watermark: Optional[bool] = None,
        primary_color: Optional[str] = None,
    ) -> Tuple[bytes, str, str]:
        """
        Render a resume in the requested format.

        Returns:
            Tuple of (content bytes, filename with extension, MIME type)
        """
        fmt = ExportFormat(export_format)
        if fmt == ExportFormat.TEXT:
            content = self.resume_to_text(resume_data, sections, include_watermark).encode("utf-8")
        elif fmt == ExportFormat.HTML:
            content = self.resume_to_html(resume_data, sections, include_watermark, primary_color).encode("utf-8")
        elif fmt == ExportFormat.DOCX:
            content = self.resume_to_docx(resume_data, sections, template_style, include_watermark, primary_color)
        elif fmt == ExportFormat.PDF:
            content = self.resume_to_pdf(resume_data, sections, include_watermark, primary_color)
        else:
            raise ValueError(f"Resumes cannot be exported as {fmt.value}")

        base = sanitize_filename((filename or "resume").replace(" ", "_"))
        logger.info(f"📄 Exported resume as {fmt.value.upper()} ({len(content)} bytes)")
        return content, f"{base}.{fmt.value}", MIME_TYPES[fmt]

    # -- cover letters -----------------------------------------------------

    @staticmethod
    def cover_letter_filename(company_name: str, job_title: str, today: Optional[date] = None) -> str:
        today = today or date.today()
        return f"CoverLetter_{safe_name(company_name)}_{safe_name(job_title)}_{today.isoformat()}"

    def cover_letter_to_text(
        self,
        content: str,
        company_name: str,
        job_title: str,
        applicant_name: str,
        include_letterhead: bool = True,
        today: Optional[date] = None,
    ) -> str:
        parts = []
        if include_letterhead:
            parts.append(f"{applicant_name}\n{long_date(today)}\n")
        parts.append(f"{company_name}\nRe: {job_title}\n{content}")
        return "\n".join(parts).strip() + "\n"

    @staticmethod
    def cover_letter_email(content: str, company_name: str, job_title: str, applicant_name: str) -> str:
        """Plain email body for pasting into a mail client."""
        return (
            f"Subject: Application for {job_title} at {company_name}\n\n"
            f"Dear Hiring Manager,\n\n{content.strip()}\n\nSincerely,\n{applicant_name}\n"
        )

    @staticmethod
    def _letterhead_lines(style: CoverLetterStyle, contact: Dict[str, str]) -> List[str]:
        email, phone, location = contact.get("email"), contact.get("phone"), contact.get("location")
        if style == CoverLetterStyle.MODERN:
            return [v for v in (email, phone, location) if v]
        if style == CoverLetterStyle.CLASSIC:
            first = " | ".join(v for v in (email, phone) if v)
            return [v for v in (first, location) if v]
        if style == CoverLetterStyle.MINIMAL:
            return [v for v in (email, phone) if v]
        joined = " • ".join(v for v in (email, phone, location) if v)
        return [joined] if joined else []

    def cover_letter_to_pdf(
        self,
        content: str,
        company_name: str,
        job_title: str,
        applicant_name: str,
        format_style: Optional[str] = None,
        include_letterhead: bool = True,
        contact_info: Optional[Dict[str, str]] = None,
        today: Optional[date] = None,
    ) -> bytes:
        style = CoverLetterStyle(format_style or self.settings.cover_letter_style)
        regular, bold = COVER_LETTER_FONTS[style]
        margin = 15 if style == CoverLetterStyle.MINIMAL else 20  # millimetres
        base = getSampleStyleSheet()["Normal"]
        centered = style == CoverLetterStyle.CLASSIC
        alignment = TA_CENTER if centered else TA_LEFT
        accent = colors.HexColor(MODERN_ACCENT) if style == CoverLetterStyle.MODERN else colors.black
        name_size = {CoverLetterStyle.MODERN: 18, CoverLetterStyle.MINIMAL: 10}.get(style, 14)

        name_style = ParagraphStyle("LetterName", parent=base, fontName=bold, fontSize=name_size,
                                    leading=name_size + 4, textColor=accent, alignment=alignment)
        contact_style = ParagraphStyle("LetterContact", parent=base, fontName=regular, fontSize=9,
                                       leading=12, textColor=colors.HexColor("#646464"), alignment=alignment)
        body_style = ParagraphStyle("LetterBody", parent=base, fontName=regular, fontSize=11,
                                    leading=15, spaceAfter=10)
        e = escape_text

        story = []
        if include_letterhead:
            if style == CoverLetterStyle.MODERN:
                story.append(HRFlowable(width="100%", thickness=2, color=accent, spaceAfter=6))
            story.append(Paragraph(e(applicant_name), name_style))
            for line in self._letterhead_lines(style, contact_info or {}):
                story.append(Paragraph(e(line), contact_style))
            if style == CoverLetterStyle.CLASSIC:
                story.append(HRFlowable(width="100%", thickness=0.5, color=colors.black, spaceBefore=6))
            story.append(Spacer(1, 12))
            story.append(Paragraph(e(long_date(today)), body_style))

        story.append(Paragraph(e(company_name), ParagraphStyle("Company", parent=body_style, spaceAfter=2)))
        story.append(Paragraph(f"Re: {e(job_title)}", body_style))
        story.append(Spacer(1, 6))

        for para in content.split("\n\n"):
            if para.strip():
                story.append(Paragraph(e(para.strip()).replace("\n", "<br/>"), body_style))

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            topMargin=margin * 2.835,
            bottomMargin=margin * 2.835,
            leftMargin=margin * 2.835,
            rightMargin=margin * 2.835,
            title=f"Cover Letter - {job_title}",
        )
        doc.build(story)
        return buffer.getvalue()

    def cover_letter_to_docx(
        self,
        content: str,
        company_name: str,
        job_title: str,
        applicant_name: str,
        format_style: Optional[str] = None,
        include_letterhead: bool = True,
        contact_info: Optional[Dict[str, str]] = None,
        today: Optional[date] = None,
    ) -> bytes:
        style = CoverLetterStyle(format_style or self.settings.cover_letter_style)
        formatter = DocxFormatter(
            font_family=DOCX_FONTS[style],
            font_size_pt=11,
            primary_color=MODERN_ACCENT if style == CoverLetterStyle.MODERN else "#000000",
        )
        doc = formatter.new_document()
        align = WD_ALIGN_PARAGRAPH.CENTER if style == CoverLetterStyle.CLASSIC else None

        if include_letterhead:
            name_size = {CoverLetterStyle.MODERN: 18, CoverLetterStyle.MINIMAL: 10}.get(style, 14)
            formatter.add_paragraph(
                doc, applicant_name, bold=True, size_pt=name_size,
                color=formatter.primary_color, align=align, space_after_pt=2,
            )
            for line in self._letterhead_lines(style, contact_info or {}):
                formatter.add_paragraph(doc, line, size_pt=9, align=align, space_after_pt=0)
            formatter.add_paragraph(doc, "")
            formatter.add_paragraph(doc, long_date(today), space_after_pt=12)

        formatter.add_paragraph(doc, company_name, space_after_pt=0)
        formatter.add_paragraph(doc, f"Re: {job_title}", space_after_pt=12)

        for para in content.split("\n\n"):
            if para.strip():
                formatter.add_paragraph(doc, para.strip(), space_after_pt=10)

        return formatter.to_bytes(doc)

    def export_cover_letter(
        self,
        content: str,
        company_name: str,
        job_title: str,
        applicant_name: str,
        export_format: str,
        format_style: Optional[str] = None,
        include_letterhead: bool = True,
        contact_info: Optional[Dict[str, str]] = None,
        today: Optional[date] = None,
    ) -> Tuple[bytes, str, str]:
        fmt = ExportFormat(export_format)
        if fmt == ExportFormat.TEXT:
            data = self.cover_letter_to_text(
                content, company_name, job_title, applicant_name, include_letterhead, today
            ).encode("utf-8")
        elif fmt == ExportFormat.PDF:
            data = self.cover_letter_to_pdf(
                content, company_name, job_title, applicant_name,
                format_style, include_letterhead, contact_info, today,
            )
        elif fmt == ExportFormat.DOCX:
            data = self.cover_letter_to_docx(
                content, company_name, job_title, applicant_name,
                format_style, include_letterhead, contact_info, today,
            )
        else:
            raise ValueError(f"Cover letters cannot be exported as {fmt.value}")

        filename = f"{self.cover_letter_filename(company_name, job_title, today)}.{fmt.value}"
        logger.info(f"✉️ Exported cover letter as {fmt.value.upper()}")
        return data, filename, MIME_TYPES[fmt]

    # -- response library --------------------------------------------------

    @staticmethod
    def filter_responses(
        responses: Iterable[Dict[str, Any]],
        include_types: Optional[Iterable[str]] = None,
        favorites_only: bool = False,
    ) -> List[Dict[str, Any]]:
        types = set(include_types) if include_types is not None else None
        return [
            r for r in responses
            if (types is None or r.get("question_type") in types)
            and (not favorites_only or r.get("is_favorite"))
        ]

    @staticmethod
    def responses_to_markdown(responses: List[Dict[str, Any]], exported_on: Optional[date] = None) -> str:
        exported_on = exported_on or date.today()
        md = "# Interview Response Library\n\n"
        md += f"*Exported on {exported_on.month}/{exported_on.day}/{exported_on.year}*\n\n"
        md += "---\n\n"

        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for response in responses:
            grouped.setdefault(response.get("question_type") or "other", []).append(response)

        for question_type, items in grouped.items():
            md += f"## {question_type[:1].upper() + question_type[1:]} Questions\n\n"
            for idx, item in enumerate(items, 1):
                md += f"### {idx}. {item.get('question', '')}\n\n"
                if item.get("current_response"):
                    md += f"**Response:**\n\n{item['current_response']}\n\n"
                if item.get("skills"):
                    md += f"**Skills:** {', '.join(item['skills'])}\n\n"
                if item.get("companies_used_for"):
                    md += f"**Used for:** {', '.join(item['companies_used_for'])}\n\n"
                if (item.get("success_count") or 0) > 0:
                    md += f"✅ *Led to {item['success_count']} successful outcome(s)*\n\n"
                md += "---\n\n"

        return md

    @staticmethod
    def responses_to_json(responses: List[Dict[str, Any]]) -> str:
        return json.dumps(responses, indent=2, ensure_ascii=False, default=str)

    def export_responses(
        self,
        responses: List[Dict[str, Any]],
        export_format: str,
        include_types: Optional[Iterable[str]] = None,
        favorites_only: bool = False,
        today: Optional[date] = None,
    ) -> Tuple[bytes, str, str]:
        fmt = ExportFormat(export_format)
        selected = self.filter_responses(responses, include_types, favorites_only)
        if not selected:
            raise ValueError("No responses to export")

        if fmt == ExportFormat.MARKDOWN:
            text = self.responses_to_markdown(selected, today)
        elif fmt == ExportFormat.JSON:
            text = self.responses_to_json(selected)
        else:
            raise ValueError(f"Responses cannot be exported as {fmt.value}")

        stamp = (today or date.today()).isoformat()
        logger.info(f"💬 Exported {len(selected)} responses as {fmt.value}")
        return text.encode("utf-8"), f"interview-responses-{stamp}.{fmt.value}", MIME_TYPES[fmt]

    # -- persistence -------------------------------------------------------

    def save_export(self, content: bytes, filename: str, timestamp: Optional[datetime] = None) -> Path:
        """Write an export under the exports directory, in a folder per day."""
        stem, _, extension = sanitize_filename(filename).rpartition(".")
        path = get_export_path(stem or "export", extension or "txt", self.exports_dir, timestamp)
        save_bytes(content, path)
        logger.info(f"💾 Saved export to {path}")
        return path
