"""
Resume quality validation and ATS optimization scoring.
"""

import re
from collections import Counter
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from careerhub.utils.logger import get_logger

logger = get_logger(__name__)


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_PATTERN = re.compile(r'^[\d\s\-\+\(\)]{10,}$')

ISSUE_PENALTIES = {'error': 15, 'warning': 8, 'info': 3}


class ValidationIssue(BaseModel):
    """One problem found in a resume."""
    type: str  # error, warning, info
    category: str
    message: str
    field: Optional[str] = None


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(phone) and bool(PHONE_PATTERN.match(phone))


def estimate_resume_length(content: Dict[str, Any]) -> float:
    """
    Rough page estimate based on how many entries each section holds.

    Args:
        content: Resume data (profile, summary, employment, education, ...)

    Returns:
        Estimated number of pages
    """
    pages = 0.1  # header/contact

    if content.get('summary'):
        pages += 0.15

    pages += len(content.get('employment') or []) * 0.2
    pages += len(content.get('education') or []) * 0.1
    if content.get('skills'):
        pages += 0.15
    pages += len(content.get('projects') or []) * 0.15
    pages += len(content.get('certifications') or []) * 0.08

    return pages


def extract_text_content(content: Dict[str, Any]) -> str:
    """Flatten the prose parts of a resume for the AI content check."""
    profile = content.get('profile') or {}
    parts = [content.get('summary'), profile.get('bio'), profile.get('headline')]

    for job in content.get('employment') or []:
        parts.append(f"{job.get('job_title', '')} {job.get('company_name', '')} {job.get('job_description') or ''}")

    for edu in content.get('education') or []:
        parts.append(f"{edu.get('degree_type', '')} {edu.get('field_of_study', '')} {edu.get('institution_name', '')}")

    return ' '.join(p.strip() for p in parts if p and p.strip())


def calculate_score(issues: List[ValidationIssue]) -> int:
    score = 100 - sum(ISSUE_PENALTIES.get(issue.type, 0) for issue in issues)
    return max(0, score)


class ResumeValidator:
    """Validate resume quality and ATS compatibility."""

    def __init__(self):
        self.min_keyword_density = 0.05  # 5%
        self.target_keyword_density = 0.10  # 10%
        self.min_bullet_length = 30  # characters
        self.max_bullet_length = 200  # characters
        self.min_pages = 0.8
        self.max_pages = 2.2

    def validate(self, content: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the rule-based checks over resume data.

        Returns:
            Dict with issues, score and the estimated length in pages
        """
        issues: List[ValidationIssue] = []
        profile = content.get('profile') or {}

        # Contact information
        if not is_valid_email(profile.get('email')):
            issues.append(ValidationIssue(
                type='error', category='Contact',
                message='Valid email address is required', field='email',
            ))
        if not is_valid_phone(profile.get('phone')):
            issues.append(ValidationIssue(
                type='warning', category='Contact',
                message='Valid phone number recommended', field='phone',
            ))
        if not profile.get('location'):
            issues.append(ValidationIssue(
                type='info', category='Contact',
                message='Location helps employers find local candidates', field='location',
            ))

        # Missing content
        if not content.get('summary') and not profile.get('bio') and not profile.get('headline'):
            issues.append(ValidationIssue(
                type='warning', category='Content',
                message='Professional summary is missing - this helps recruiters understand your value quickly',
            ))

        employment = content.get('employment') or []
        if not employment:
            issues.append(ValidationIssue(
                type='error', category='Content',
                message='No work experience listed - add your employment history',
            ))

        if not content.get('education'):
            issues.append(ValidationIssue(
                type='warning', category='Content',
                message='No education listed - add your educational background',
            ))

        skills = content.get('skills') or []
        if not skills:
            issues.append(ValidationIssue(
                type='warning', category='Content',
                message='No skills listed - add relevant skills for your target role',
            ))
        elif len(skills) < 5:
            issues.append(ValidationIssue(
                type='info', category='Content',
                message='Consider adding more skills (aim for 8-12 key skills)',
            ))

        # Length
        pages = estimate_resume_length(content)
        if pages < self.min_pages:
            issues.append(ValidationIssue(
                type='info', category='Length',
                message='Resume appears short - consider adding more detail to reach 1 page',
            ))
        elif pages > self.max_pages:
            issues.append(ValidationIssue(
                type='warning', category='Length',
                message='Resume may be too long - aim for 1-2 pages maximum',
            ))

        # Format consistency
        if employment:
            if not all(job.get('start_date') for job in employment):
                issues.append(ValidationIssue(
                    type='warning', category='Format',
                    message='Some work experiences are missing dates',
                ))
            if not all(job.get('job_description') for job in employment):
                issues.append(ValidationIssue(
                    type='info', category='Format',
                    message='Some work experiences lack descriptions',
                ))

        score = calculate_score(issues)
        logger.info(f"📋 Resume validation: score {score}/100, {len(issues)} issue(s)")

        return {
            'issues': [issue.model_dump() for issue in issues],
            'score': score,
            'estimated_pages': round(pages, 2),
            'error_count': sum(1 for i in issues if i.type == 'error'),
            'warning_count': sum(1 for i in issues if i.type == 'warning'),
            'info_count': sum(1 for i in issues if i.type == 'info'),
        }

    @staticmethod
    def issues_from_ai_result(data: Dict[str, Any]) -> List[ValidationIssue]:
        """Map a ``validate-resume-content`` reply onto validation issues."""
        issues: List[ValidationIssue] = []

        spell_errors = data.get('spellErrors') or []
        if spell_errors:
            preview = ', '.join(spell_errors[:3])
            if len(spell_errors) > 3:
                preview += '...'
            issues.append(ValidationIssue(
                type='error', category='Spelling',
                message=f"Found {len(spell_errors)} spelling/grammar issue(s): {preview}",
            ))

        for issue in data.get('toneIssues') or []:
            issues.append(ValidationIssue(type='warning', category='Professional Tone', message=issue))

        for suggestion in data.get('suggestions') or []:
            issues.append(ValidationIssue(type='info', category='Improvement', message=suggestion))

        return issues

    # -- ATS scoring -------------------------------------------------------

    def extract_keywords_from_job_description(self, job_description: str) -> Dict[str, int]:
        """
        Extract important keywords from job description.

        Returns:
            Dict mapping keyword to frequency in JD
        """
        tech_patterns = [
            # Languages
            r'\b(python|java|javascript|typescript|kotlin|go|rust|c\+\+|c#|ruby|php|swift)\b',
            # Frameworks
            r'\b(react|vue|angular|node\.?js|express|django|flask|spring|fastapi|next\.?js)\b',
            # Cloud/DevOps
            r'\b(aws|azure|gcp|docker|kubernetes|k8s|jenkins|terraform|ansible|ci/cd)\b',
            # Databases
            r'\b(postgresql|mysql|mongodb|redis|elasticsearch|dynamodb|sql)\b',
            # Business and soft skills
            r'\b(leadership|stakeholder|budget|forecasting|negotiation|mentoring|strategy)\b',
            # Process
            r'\b(agile|scrum|kanban|devops|lean|six\s*sigma)\b',
        ]

        jd_lower = job_description.lower()
        keyword_counts = Counter()

        for pattern in tech_patterns:
            for match in re.findall(pattern, jd_lower):
                keyword_counts[match] += 1

        # High-frequency words (appearing 3+ times)
        word_counts = Counter(re.findall(r'\b[a-z]{4,}\b', jd_lower))
        for word, count in word_counts.items():
            if count >= 3 and word not in keyword_counts:
                keyword_counts[word] = count

        return dict(keyword_counts.most_common(50))

    def calculate_keyword_density(self, resume_text: str, keywords: Dict[str, int]) -> Dict[str, Any]:
        """
        Calculate keyword density in resume.

        Args:
            resume_text: Full resume text
            keywords: Dict of keywords from job description

        Returns:
            Dict with keyword stats
        """
        resume_lower = resume_text.lower()
        total_words = len(resume_text.split())

        keyword_stats = {}
        total_keyword_matches = 0

        for keyword, jd_count in keywords.items():
            resume_count = resume_lower.count(keyword.lower())
            if resume_count > 0:
                coverage = (resume_count / jd_count * 100) if jd_count > 0 else 0
                keyword_stats[keyword] = {
                    'jd_count': jd_count,
                    'resume_count': resume_count,
                    'coverage': coverage,
                    'status': 'excellent' if coverage >= 50 else 'good' if coverage >= 30 else 'low',
                }
                total_keyword_matches += resume_count

        return {
            'keywords': keyword_stats,
            'missing': [k for k in keywords if k not in keyword_stats],
            'overall_density': (total_keyword_matches / total_words) if total_words > 0 else 0,
            'total_matches': total_keyword_matches,
            'total_words': total_words,
        }

    def validate_text_structure(self, resume_text: str) -> Dict[str, Any]:
        """Check section headings and line lengths of a plain-text resume."""
        issues = []
        sections_found = {'summary': False, 'skills': False, 'experience': False, 'education': False}
        headings = ('summary', 'skills', 'experience', 'education')

        line_count = 0
        short_lines = 0
        long_lines = 0

        for raw in resume_text.splitlines():
            text = raw.strip().lower()
            if not text or set(text) == {'-'}:
                continue

            if 'summary' in text or 'objective' in text:
                sections_found['summary'] = True
            elif 'skills' in text:
                sections_found['skills'] = True
            elif 'experience' in text or 'employment' in text:
                sections_found['experience'] = True
            elif 'education' in text:
                sections_found['education'] = True

            if len(text) > 20 and not any(h in text for h in headings):
                line_count += 1
                if len(text) < self.min_bullet_length:
                    short_lines += 1
                elif len(text) > self.max_bullet_length:
                    long_lines += 1

        for section, found in sections_found.items():
            if not found:
                issues.append(f"Missing {section} section")
        if short_lines:
            issues.append(f"{short_lines} lines are too short (< {self.min_bullet_length} chars)")
        if long_lines:
            issues.append(f"{long_lines} lines are too long (> {self.max_bullet_length} chars)")

        return {
            'sections_found': sections_found,
            'line_count': line_count,
            'short_lines': short_lines,
            'long_lines': long_lines,
            'issues': issues,
            'valid': not issues,
        }

    def calculate_ats_score(self, resume_text: str, job_description: str) -> Dict[str, Any]:
        """
        Calculate ATS compatibility score of a resume against a job description.

        Returns:
            Dict with total_score, breakdown (structure /20, keywords /50,
            formatting /30), keyword stats and recommendations
        """
        structure = self.validate_text_structure(resume_text)
        structure_score = 20 if structure['valid'] else max(0, 20 - len(structure['issues']) * 4)

        keywords = self.extract_keywords_from_job_description(job_description)
        keyword_stats = self.calculate_keyword_density(resume_text, keywords)

        statuses = [v['status'] for v in keyword_stats['keywords'].values()]
        excellent_count = statuses.count('excellent')
        good_count = statuses.count('good')
        coverage_rate = ((excellent_count + good_count * 0.6) / len(keywords)) if keywords else 0
        keyword_score = min(50, int(coverage_rate * 50))

        format_score = 30
        format_score -= min(10, structure['short_lines'] * 2)
        format_score -= min(10, structure['long_lines'] * 2)
        if keyword_stats['overall_density'] < self.min_keyword_density:
            format_score -= 10

        total_score = structure_score + keyword_score + format_score
        logger.info(
            f"🎯 ATS score {total_score}/100 "
            f"(structure {structure_score}/20, keywords {keyword_score}/50, formatting {format_score}/30)"
        )

        return {
            'total_score': total_score,
            'breakdown': {
                'structure': structure_score,
                'keywords': keyword_score,
                'formatting': format_score,
            },
            'structure_result': structure,
            'keyword_stats': keyword_stats,
            'recommendations': self._generate_recommendations(total_score, structure, keyword_stats),
        }

    def _generate_recommendations(self, score: int, structure: Dict, keyword_stats: Dict) -> List[str]:
        """Generate improvement recommendations."""
        recommendations = []

        if score >= 90:
            recommendations.append("✅ Excellent! Your resume is highly optimized for ATS.")
        elif score >= 75:
            recommendations.append("⚠️ Good, but there's room for improvement.")
        else:
            recommendations.append("❌ Needs significant optimization for ATS.")

        for issue in structure['issues']:
            if issue.startswith('Missing'):
                recommendations.append(f"Add {issue.replace('Missing ', '')} to resume")

        if keyword_stats['missing']:
            recommendations.append(f"Consider adding: {', '.join(keyword_stats['missing'][:5])}")

        low_coverage = [
            k for k, v in keyword_stats['keywords'].items()
            if v['status'] == 'low' and v['jd_count'] >= 3
        ]
        if low_coverage:
            recommendations.append(f"Increase usage of: {', '.join(low_coverage[:5])}")

        if keyword_stats['overall_density'] < self.target_keyword_density:
            recommendations.append(
                f"Increase keyword density from {keyword_stats['overall_density']:.1%} "
                f"to {self.target_keyword_density:.1%}"
            )

        return recommendations
