"""
Interview preparation service.

Interviews, success predictions and the reusable response library.
"""

from typing import Any, Dict, List, Optional

from careerhub.models.interview import Interview, InterviewPrediction, QuestionType, ResponseLibraryEntry
from careerhub.services import statistics
from careerhub.services.base import BaseService
from careerhub.services.functions_service import FunctionsService
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


class InterviewService(BaseService):

    interviews_table = "interviews"
    predictions_table = "interview_success_predictions"
    responses_table = "interview_response_library"

    # -- interviews --------------------------------------------------------

    def list_interviews(self, job_id: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {"job_id": job_id} if job_id else {}
        return self._list(self.interviews_table, order_by="interview_date", ascending=True, **filters)

    def get_interview(self, interview_id: str) -> Dict[str, Any]:
        return self._get(self.interviews_table, interview_id)

    def create_interview(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.interviews_table, Interview, data)

    def update_interview(self, interview_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(self.interviews_table, Interview, interview_id, changes)

    def delete_interview(self, interview_id: str) -> None:
        self._delete(self.interviews_table, interview_id)

    # -- predictions -------------------------------------------------------

    def list_predictions(self) -> List[Dict[str, Any]]:
        return self._list(self.predictions_table, order_by="created_at", ascending=True)

    def create_prediction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.predictions_table, InterviewPrediction, data)

    def predict_success(self, interview_id: str, functions: Optional[FunctionsService] = None,
                        **factors) -> Dict[str, Any]:
        """Ask ``calculate-interview-success`` for a prediction; the function stores the row."""
        self.get_interview(interview_id)
        functions = functions or FunctionsService(self.client)
        return functions.calculate_interview_success(interview_id, **factors)

    def get_prediction_accuracy(self) -> Dict[str, Any]:
        """Compare past predictions with the outcomes recorded on their interviews."""
        predictions = self.list_predictions()
        interview_ids = sorted({p["interview_id"] for p in predictions if p.get("interview_id")})
        interviews = []
        if interview_ids:
            interviews = (
                self.client.table(self.interviews_table)
                .select("id,outcome")
                .eq("user_id", self.user_id)
                .in_("id", interview_ids)
                .execute()
                .data or []
            )
        return statistics.prediction_accuracy(predictions, interviews)

    # -- response library --------------------------------------------------

    def list_responses(self, question_type: Optional[str] = None,
                       favorites_only: bool = False) -> List[Dict[str, Any]]:
        filters: Dict[str, Any] = {}
        if question_type:
            filters["question_type"] = QuestionType(question_type).value
        if favorites_only:
            filters["is_favorite"] = True
        return self._list(self.responses_table, **filters)

    def get_response(self, response_id: str) -> Dict[str, Any]:
        return self._get(self.responses_table, response_id)

    def create_response(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.responses_table, ResponseLibraryEntry, data)

    def update_response(self, response_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(self.responses_table, ResponseLibraryEntry, response_id, changes)

    def delete_response(self, response_id: str) -> None:
        self._delete(self.responses_table, response_id)

    def toggle_favorite(self, response_id: str) -> Dict[str, Any]:
        current = self.get_response(response_id)
        return self.update_response(response_id, {"is_favorite": not current.get("is_favorite")})

    def record_success(self, response_id: str, company: Optional[str] = None) -> Dict[str, Any]:
        """Bump the success count, remembering the company it worked for."""
        current = self.get_response(response_id)
        changes: Dict[str, Any] = {"success_count": (current.get("success_count") or 0) + 1}
        used_for = list(current.get("companies_used_for") or [])
        if company and company not in used_for:
            changes["companies_used_for"] = used_for + [company]
        logger.info(f"🏆 Response {response_id} led to a successful outcome")
        return self.update_response(response_id, changes)

    def get_response_stats(self) -> Dict[str, Any]:
        return statistics.response_library_stats(self.list_responses())

    def coach_response(self, response_id: str, functions: Optional[FunctionsService] = None) -> Dict[str, Any]:
        entry = self.get_response(response_id)
        if not entry.get("current_response"):
            raise ValueError("Write a response before asking for coaching")
        functions = functions or FunctionsService(self.client)
        return functions.coach_interview_response(
            entry["question"], entry["current_response"], question_type=entry.get("question_type"),
        )
