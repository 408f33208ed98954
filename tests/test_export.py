"""
Tests for resume, cover letter and response library exports.

Tests:
- Resume data normalisation and section selection
- Plain text, HTML, DOCX and PDF resume rendering
- Cover letter filenames, text, email body and binary formats
- Response library markdown/JSON export
- Saving exports to dated folders
"""

import io
import json
from datetime import date, datetime

import pytest
from docx import Document
from pydantic import ValidationError

from careerhub.config.settings import ExportSettings
from careerhub.models.documents import CoverLetterStyle
from careerhub.services.export_service import (
    RULE,
    ExportService,
    enabled_sections,
    format_resume_data,
    long_date,
)


TODAY = date(2025, 1, 5)


@pytest.fixture
def resume_data():
    return {
        "profile": {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email": "ada@example.com",
            "phone": "555-0100",
            "location": "London",
            "headline": "Engineer",
        },
        "summary": "Analytical engine pioneer.",
        "employment": [{
            "job_title": "Engineer",
            "company_name": "Acme",
            "start_date": "2020-01-15",
            "end_date": "2021-01-01",
            "is_current": True,
            "job_description": "Built engines",
        }],
        "education": [{
            "degree_type": "BSc",
            "field_of_study": "Mathematics",
            "institution_name": "UCL",
            "graduation_date": "2015-06-01",
            "gpa": 3.8,
        }],
        "skills": [{"skill_name": "Python"}, {"skill_name": "SQL"}],
        "certifications": [],
        "projects": [],
    }


@pytest.fixture
def exporter(tmp_path):
    return ExportService(ExportSettings(), exports_dir=tmp_path / "exports")


class TestFormatResumeData:
    """Tests for format_resume_data and enabled_sections."""

    def test_experience_dates(self, resume_data):
        exp = format_resume_data(resume_data)["experience"][0]
        assert exp["dates"] == "Jan 2020 - Present"
        assert exp["company"] == "Acme"

    def test_education(self, resume_data):
        edu = format_resume_data(resume_data)["education"][0]
        assert edu == {"degree": "BSc in Mathematics", "institution": "UCL", "year": "2015", "gpa": 3.8}

    def test_hidden_gpa_and_ongoing_education(self, resume_data):
        resume_data["education"][0].update(show_gpa=False, graduation_date=None)
        edu = format_resume_data(resume_data)["education"][0]
        assert edu["gpa"] is None
        assert edu["year"] == "Present"

    def test_project_technologies_from_string(self):
        data = format_resume_data({"projects": [{"project_name": "P", "technologies": "Python, Flask ,"}]})
        assert data["projects"][0]["technologies"] == ["Python", "Flask"]

    def test_enabled_sections_keep_fixed_order(self):
        sections = [{"id": "skills"}, {"id": "summary", "enabled": False}, {"id": "experience", "enabled": True}]
        assert enabled_sections(sections) == ["experience", "skills"]
        assert enabled_sections(None)[0] == "summary"

    def test_long_date(self):
        assert long_date(TODAY) == "January 5, 2025"


class TestResumeText:
    """Tests for the plain text resume."""

    def test_layout(self, exporter, resume_data):
        lines = exporter.resume_to_text(resume_data).split("\n")
        assert lines[:4] == ["ADA LOVELACE", "Engineer", "ada@example.com | 555-0100 | London", ""]
        assert lines[4:8] == ["PROFESSIONAL SUMMARY", RULE, "Analytical engine pioneer.", ""]
        assert "Acme | Jan 2020 - Present" in lines
        assert "UCL | 2015" in lines
        assert "GPA: 3.8" in lines
        assert lines[-3:] == ["Python, SQL", "", ""]

    def test_empty_sections_are_skipped(self, exporter, resume_data):
        text = exporter.resume_to_text(resume_data)
        assert "CERTIFICATIONS" not in text
        assert "PROJECTS" not in text

    def test_section_configuration(self, exporter, resume_data):
        text = exporter.resume_to_text(resume_data, sections=[{"id": "skills"}])
        assert "SKILLS" in text
        assert "WORK EXPERIENCE" not in text

    def test_contact_without_location(self, exporter, resume_data):
        resume_data["profile"]["location"] = None
        assert "ada@example.com | 555-0100\n" in exporter.resume_to_text(resume_data)

    def test_watermark(self, exporter, resume_data):
        text = exporter.resume_to_text(resume_data, include_watermark=True)
        assert text.endswith(f"{RULE}\nGenerated with Resume Builder\n")


class TestResumeHtml:
    """Tests for the HTML resume."""

    def test_values_are_escaped(self, exporter, resume_data):
        resume_data["summary"] = "<script>alert(1)</script>"
        html = exporter.resume_to_html(resume_data)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_title_and_color(self, exporter, resume_data):
        html = exporter.resume_to_html(resume_data, primary_color="#ff0000")
        assert "<title>Ada Lovelace - Resume</title>" in html
        assert "color:#ff0000" in html
        assert "<h2" in html and "Work Experience</h2>" in html

    @pytest.mark.parametrize("fmt", ["html", "docx", "pdf"])
    def test_style_injection_in_color_is_rejected(self, exporter, resume_data, fmt):
        with pytest.raises(ValueError, match="Invalid color"):
            exporter.export_resume(resume_data, fmt, primary_color="red;background:url(x)")

    def test_short_hex_color_is_rejected(self, exporter, resume_data):
        with pytest.raises(ValueError):
            exporter.resume_to_html(resume_data, primary_color="#f00")

    def test_settings_reject_bad_color(self):
        with pytest.raises(ValidationError):
            ExportSettings(primary_color="#12345g")
        assert ExportSettings(primary_color="#ABCdef").primary_color == "#ABCdef"


class TestResumeBinary:
    """Tests for DOCX and PDF resumes."""

    def test_docx(self, exporter, resume_data):
        content = exporter.resume_to_docx(resume_data, template_style="modern")
        assert content.startswith(b"PK")
        texts = [p.text for p in Document(io.BytesIO(content)).paragraphs]
        assert texts[0] == "Ada Lovelace"
        # modern titles keep their case
        assert "Work Experience" in texts
        assert "Built engines" in texts

    def test_docx_classic_uppercases_titles(self, exporter, resume_data):
        doc = Document(io.BytesIO(exporter.resume_to_docx(resume_data, template_style="classic")))
        assert "WORK EXPERIENCE" in [p.text for p in doc.paragraphs]

    def test_docx_unknown_style(self, exporter, resume_data):
        with pytest.raises(ValueError):
            exporter.resume_to_docx(resume_data, template_style="baroque")

    def test_pdf(self, exporter, resume_data):
        assert exporter.resume_to_pdf(resume_data, include_watermark=True).startswith(b"%PDF")

    @pytest.mark.parametrize("fmt, extension, mime", [
        ("txt", "txt", "text/plain"),
        ("html", "html", "text/html"),
        ("pdf", "pdf", "application/pdf"),
    ])
    def test_export_resume(self, exporter, resume_data, fmt, extension, mime):
        content, filename, mime_type = exporter.export_resume(resume_data, fmt, filename="My Resume")
        assert content
        assert filename == f"My_Resume.{extension}"
        assert mime_type == mime

    def test_export_resume_rejects_markdown(self, exporter, resume_data):
        with pytest.raises(ValueError):
            exporter.export_resume(resume_data, "md")


class TestCoverLetter:
    """Tests for cover letter exports."""

    def test_filename(self):
        assert ExportService.cover_letter_filename("Acme Inc.", "Senior Engineer", TODAY) == \
            "CoverLetter_Acme_Inc__Senior_Engineer_2025-01-05"

    def test_text_with_letterhead(self, exporter):
        text = exporter.cover_letter_to_text("Body", "Acme", "Engineer", "Ada Lovelace", today=TODAY)
        assert text == "Ada Lovelace\nJanuary 5, 2025\n\nAcme\nRe: Engineer\nBody\n"

    def test_text_without_letterhead(self, exporter):
        text = exporter.cover_letter_to_text("Body", "Acme", "Engineer", "Ada", include_letterhead=False)
        assert text == "Acme\nRe: Engineer\nBody\n"

    def test_email(self):
        email = ExportService.cover_letter_email("  I am keen.  ", "Acme", "Engineer", "Ada")
        assert email.startswith("Subject: Application for Engineer at Acme\n\nDear Hiring Manager,")
        assert email.endswith("I am keen.\n\nSincerely,\nAda\n")

    @pytest.mark.parametrize("style", ["professional", "modern", "classic", "minimal"])
    def test_pdf_styles(self, exporter, style):
        content, filename, _ = exporter.export_cover_letter(
            "First paragraph.\n\nSecond paragraph.", "Acme", "Engineer", "Ada", "pdf",
            format_style=style, contact_info={"email": "ada@example.com", "phone": "555"}, today=TODAY,
        )
        assert content.startswith(b"%PDF")
        assert filename == "CoverLetter_Acme_Engineer_2025-01-05.pdf"

    def test_docx(self, exporter):
        content, _, mime = exporter.export_cover_letter(
            "First.\n\nSecond.", "Acme", "Engineer", "Ada", "docx", format_style="classic", today=TODAY,
        )
        texts = [p.text for p in Document(io.BytesIO(content)).paragraphs]
        assert texts[0] == "Ada"
        assert "January 5, 2025" in texts
        assert texts[-2:] == ["First.", "Second."]
        assert mime.endswith("wordprocessingml.document")

    def test_docx_font_follows_style(self, exporter):
        content = exporter.cover_letter_to_docx("Body", "Acme", "Engineer", "Ada", format_style="minimal")
        paragraph = Document(io.BytesIO(content)).paragraphs[-1]
        assert paragraph.runs[0].font.name == "Courier New"

    def test_letterhead_lines(self):
        contact = {"email": "a@x.io", "phone": "555", "location": "London"}
        assert ExportService._letterhead_lines(CoverLetterStyle.PROFESSIONAL, contact) == [
            "a@x.io • 555 • London"
        ]

    def test_rejects_html(self, exporter):
        with pytest.raises(ValueError):
            exporter.export_cover_letter("Body", "Acme", "Engineer", "Ada", "html")


class TestResponseLibrary:
    """Tests for response library exports."""

    RESPONSES = [
        {"question": "Tell me about a conflict", "question_type": "behavioral",
         "current_response": "STAR answer", "skills": ["Communication"], "success_count": 2, "is_favorite": True},
        {"question": "Explain indexes", "question_type": "technical", "current_response": "B-trees"},
        {"question": "Describe a failure", "question_type": "behavioral"},
    ]

    def test_markdown_groups_by_type(self):
        md = ExportService.responses_to_markdown(self.RESPONSES, TODAY)
        assert md.startswith("# Interview Response Library\n\n*Exported on 1/5/2025*\n\n---\n\n")
        assert md.index("## Behavioral Questions") < md.index("## Technical Questions")
        assert "### 2. Describe a failure" in md
        assert "**Skills:** Communication" in md
        assert "*Led to 2 successful outcome(s)*" in md

    def test_filters(self):
        assert len(ExportService.filter_responses(self.RESPONSES, ["technical"])) == 1
        assert len(ExportService.filter_responses(self.RESPONSES, favorites_only=True)) == 1

    def test_json_export(self, exporter):
        content, filename, mime = exporter.export_responses(self.RESPONSES, "json", today=TODAY)
        assert json.loads(content) == self.RESPONSES
        assert filename == "interview-responses-2025-01-05.json"
        assert mime == "application/json"

    def test_empty_selection(self, exporter):
        with pytest.raises(ValueError, match="No responses to export"):
            exporter.export_responses(self.RESPONSES, "md", include_types=["situational"])


def test_save_export(exporter, tmp_path):
    path = exporter.save_export(b"hello", "My Resume.txt", timestamp=datetime(2025, 1, 5, 9, 30))
    assert path == tmp_path / "exports" / "2025-01-05" / "My_Resume.txt"
    assert path.read_bytes() == b"hello"
