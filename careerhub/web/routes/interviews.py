"""Interview, prediction and response library endpoints."""

from flask import Blueprint, jsonify, request

from careerhub.services.functions_service import FunctionsService
from careerhub.services.interview_service import InterviewService
from careerhub.web.helpers import extension, json_body, query_flag, service


interviews_bp = Blueprint("interviews", __name__, url_prefix="/api/interviews")
responses_bp = Blueprint("responses", __name__, url_prefix="/api/responses")


@interviews_bp.route("", methods=["GET"])
def list_interviews():
    interviews = service(InterviewService).list_interviews(request.args.get("job_id") or None)
    return jsonify({"success": True, "interviews": interviews})


@interviews_bp.route("", methods=["POST"])
def create_interview():
    interview = service(InterviewService).create_interview(json_body("job_id", "interview_date"))
    return jsonify({"success": True, "interview": interview}), 201


@interviews_bp.route("/predictions", methods=["GET"])
def list_predictions():
    return jsonify({"success": True, "predictions": service(InterviewService).list_predictions()})


@interviews_bp.route("/prediction-accuracy", methods=["GET"])
def prediction_accuracy():
    return jsonify({"success": True, **service(InterviewService).get_prediction_accuracy()})


@interviews_bp.route("/<interview_id>", methods=["GET"])
def get_interview(interview_id):
    return jsonify({"success": True, "interview": service(InterviewService).get_interview(interview_id)})


@interviews_bp.route("/<interview_id>", methods=["PATCH", "PUT"])
def update_interview(interview_id):
    interview = service(InterviewService).update_interview(interview_id, json_body())
    return jsonify({"success": True, "interview": interview})


@interviews_bp.route("/<interview_id>", methods=["DELETE"])
def delete_interview(interview_id):
    service(InterviewService).delete_interview(interview_id)
    return jsonify({"success": True})


@interviews_bp.route("/<interview_id>/predict", methods=["POST"])
def predict_success(interview_id):
    interviews = service(InterviewService)
    functions = FunctionsService(interviews.client, extension()["cache"])
    result = interviews.predict_success(interview_id, functions=functions, **json_body())
    return jsonify({"success": True, "prediction": result})


# -- response library ----------------------------------------------------------

@responses_bp.route("", methods=["GET"])
def list_responses():
    responses = service(InterviewService).list_responses(
        question_type=request.args.get("question_type") or None,
        favorites_only=query_flag("favorites_only"),
    )
    return jsonify({"success": True, "responses": responses})


@responses_bp.route("", methods=["POST"])
def create_response():
    entry = service(InterviewService).create_response(json_body("question", "question_type"))
    return jsonify({"success": True, "response": entry}), 201


@responses_bp.route("/stats", methods=["GET"])
def response_stats():
    return jsonify({"success": True, **service(InterviewService).get_response_stats()})


@responses_bp.route("/<response_id>", methods=["GET"])
def get_response(response_id):
    return jsonify({"success": True, "response": service(InterviewService).get_response(response_id)})


@responses_bp.route("/<response_id>", methods=["PATCH", "PUT"])
def update_response(response_id):
    entry = service(InterviewService).update_response(response_id, json_body())
    return jsonify({"success": True, "response": entry})


@responses_bp.route("/<response_id>", methods=["DELETE"])
def delete_response(response_id):
    service(InterviewService).delete_response(response_id)
    return jsonify({"success": True})


@responses_bp.route("/<response_id>/favorite", methods=["POST"])
def toggle_favorite(response_id):
    return jsonify({"success": True, "response": service(InterviewService).toggle_favorite(response_id)})


@responses_bp.route("/<response_id>/success", methods=["POST"])
def record_success(response_id):
    entry = service(InterviewService).record_success(response_id, json_body().get("company"))
    return jsonify({"success": True, "response": entry})


@responses_bp.route("/<response_id>/coach", methods=["POST"])
def coach_response(response_id):
    interviews = service(InterviewService)
    functions = FunctionsService(interviews.client, extension()["cache"])
    return jsonify({"success": True, "coaching": interviews.coach_response(response_id, functions)})
