"""
Serverless function delegation.

All AI-generated content, scoring and research runs in remotely deployed
functions. This service gives each one a named method and a consistent
log trail; errors propagate as FunctionInvokeError.
"""

import hashlib
import json
from typing import Any, Dict, List, Optional

from careerhub.backend.cache import AppCache
from careerhub.backend.client import BackendClient
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)

# Research results change slowly, keep them for an hour
RESEARCH_CACHE_TTL = 3600


class FunctionsService:
    """Service for invoking the backend's serverless functions."""

    def __init__(self, client: BackendClient, cache: Optional[AppCache] = None):
        """
        Initialize Functions Service.

        Args:
            client: Backend client (bound to the user's session)
            cache: Optional cache for slow-changing research results
        """
        self.client = client
        self.cache = cache

    def invoke(self, name: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """
        Invoke a function by name and return its JSON reply.

        Args:
            name: Deployed function name, e.g. ``generate-cover-letter``
            body: JSON body

        Returns:
            Decoded JSON reply
        """
        logger.info(f"⚡ Invoking function {name}")
        data = self.client.functions.invoke(name, body or {})
        logger.debug(f"   ✅ {name} returned {type(data).__name__}")
        return data

    def _invoke_cached(self, name: str, body: Dict[str, Any]) -> Any:
        if self.cache is None:
            return self.invoke(name, body)
        digest = hashlib.sha1(json.dumps(body, sort_keys=True, default=str).encode("utf-8")).hexdigest()
        return self.cache.with_cache(
            f"fn:{name}:{digest}", lambda: self.invoke(name, body), ttl_seconds=RESEARCH_CACHE_TTL
        )

    # -- documents ---------------------------------------------------------

    def generate_cover_letter(self, job: Dict, profile: Dict, tone: str = "professional",
                              template: Optional[str] = None, **extra) -> Dict:
        return self.invoke("generate-cover-letter", {
            "job": job, "profile": profile, "tone": tone, "template": template, **extra,
        })

    def generate_resume_content(self, profile: Dict, job: Optional[Dict] = None,
                                section: Optional[str] = None) -> Dict:
        return self.invoke("generate-resume-content", {"profile": profile, "job": job, "section": section})

    def tailor_resume_experience(self, experience: Dict, job_description: str) -> Dict:
        return self.invoke("tailor-resume-experience", {
            "experience": experience, "jobDescription": job_description,
        })

    def validate_resume_content(self, content: str, resume_name: str) -> Dict:
        return self.invoke("validate-resume-content", {"content": content, "resumeName": resume_name})

    # -- interview prep ----------------------------------------------------

    def generate_interview_questions(self, job: Dict, question_types: Optional[List[str]] = None) -> Dict:
        return self.invoke("generate-interview-questions", {"job": job, "questionTypes": question_types or []})

    def generate_interview_preparation(self, interview: Dict, job: Dict) -> Dict:
        return self.invoke("generate-interview-preparation", {"interview": interview, "job": job})

    def generate_mock_interview(self, job: Dict, interview_type: str = "behavioral",
                                question_count: int = 5) -> Dict:
        return self.invoke("generate-mock-interview", {
            "job": job, "interviewType": interview_type, "questionCount": question_count,
        })

    def calculate_interview_success(self, interview_id: str, **factors) -> Dict:
        return self.invoke("calculate-interview-success", {"interviewId": interview_id, **factors})

    def coach_interview_response(self, question: str, response: str,
                                 question_type: Optional[str] = None) -> Dict:
        return self.invoke("coach-interview-response", {
            "question": question, "response": response, "questionType": question_type,
        })

    def evaluate_coding_solution(self, problem: str, solution: str, language: str = "python") -> Dict:
        return self.invoke("evaluate-coding-solution", {
            "problem": problem, "solution": solution, "language": language,
        })

    def generate_technical_questions(self, job: Dict, difficulty: str = "intermediate") -> Dict:
        return self.invoke("generate-technical-questions", {"job": job, "difficulty": difficulty})

    # -- research ----------------------------------------------------------

    def generate_company_research(self, company_name: str, job_title: Optional[str] = None) -> Dict:
        return self._invoke_cached("generate-company-research", {
            "companyName": company_name, "jobTitle": job_title,
        })

    def research_salary(self, job_title: str, location: Optional[str] = None,
                        experience_level: Optional[str] = None) -> Dict:
        return self._invoke_cached("research-salary", {
            "jobTitle": job_title, "location": location, "experienceLevel": experience_level,
        })

    def analyze_job_match(self, job: Dict, profile: Dict) -> Dict:
        return self.invoke("analyze-job-match", {"job": job, "profile": profile})

    def analyze_skill_gaps(self, job: Dict, skills: List[Dict]) -> Dict:
        return self.invoke("analyze-skill-gaps", {"job": job, "skills": skills})

    # -- networking --------------------------------------------------------

    def generate_follow_up_template(self, contact: Dict, context: Optional[str] = None) -> Dict:
        return self.invoke("generate-follow-up-template", {"contact": contact, "context": context})

    def generate_contact_suggestions(self, profile: Dict, target_companies: Optional[List[str]] = None) -> Dict:
        return self.invoke("generate-contact-suggestions", {
            "profile": profile, "targetCompanies": target_companies or [],
        })

    def calculate_relationship_health(self, contact: Dict, interactions: List[Dict]) -> Dict:
        return self.invoke("calculate-relationship-health", {"contact": contact, "interactions": interactions})

    def import_job_from_url(self, url: str) -> Dict:
        return self.invoke("import-job-from-url", {"url": url})
