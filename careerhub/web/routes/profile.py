"""Profile and profile section endpoints."""

from flask import Blueprint, jsonify

from careerhub.services.profile_service import ProfileService
from careerhub.web.helpers import json_body, service


bp = Blueprint("profile", __name__, url_prefix="/api/profile")


@bp.route("", methods=["GET"])
def get_profile():
    return jsonify({"success": True, "profile": service(ProfileService).get_profile()})


@bp.route("", methods=["PUT", "POST"])
def save_profile():
    profile = service(ProfileService).save_profile(json_body("first_name", "last_name", "email"))
    return jsonify({"success": True, "profile": profile})


@bp.route("/full", methods=["GET"])
def full_profile():
    return jsonify({"success": True, **service(ProfileService).get_full_profile()})


@bp.route("/overview", methods=["GET"])
def overview():
    return jsonify({"success": True, **service(ProfileService).get_overview()})


@bp.route("/<section>", methods=["GET"])
def list_section(section):
    return jsonify({"success": True, "items": service(ProfileService).list_section(section)})


@bp.route("/<section>", methods=["POST"])
def create_section_item(section):
    item = service(ProfileService).create_section_item(section, json_body())
    return jsonify({"success": True, "item": item}), 201


@bp.route("/<section>/<item_id>", methods=["GET"])
def get_section_item(section, item_id):
    return jsonify({"success": True, "item": service(ProfileService).get_section_item(section, item_id)})


@bp.route("/<section>/<item_id>", methods=["PATCH", "PUT"])
def update_section_item(section, item_id):
    item = service(ProfileService).update_section_item(section, item_id, json_body())
    return jsonify({"success": True, "item": item})


@bp.route("/<section>/<item_id>", methods=["DELETE"])
def delete_section_item(section, item_id):
    service(ProfileService).delete_section_item(section, item_id)
    return jsonify({"success": True})
