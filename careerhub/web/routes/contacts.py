"""Networking endpoints: contacts, interactions and follow-ups."""

from datetime import date

from flask import Blueprint, jsonify

from careerhub.services.contact_service import ContactService
from careerhub.services.functions_service import FunctionsService
from careerhub.web.helpers import extension, json_body, service


bp = Blueprint("contacts", __name__, url_prefix="/api/contacts")


@bp.route("", methods=["GET"])
def list_contacts():
    return jsonify({"success": True, "contacts": service(ContactService).list_contacts()})


@bp.route("", methods=["POST"])
def create_contact():
    contact = service(ContactService).create_contact(json_body("first_name"))
    return jsonify({"success": True, "contact": contact}), 201


@bp.route("/follow-ups", methods=["GET"])
def due_follow_ups():
    due = service(ContactService).get_due_follow_ups()
    return jsonify({"success": True, "contacts": due, "count": len(due)})


@bp.route("/<contact_id>", methods=["GET"])
def get_contact(contact_id):
    return jsonify({"success": True, "contact": service(ContactService).get_contact(contact_id)})


@bp.route("/<contact_id>", methods=["PATCH", "PUT"])
def update_contact(contact_id):
    contact = service(ContactService).update_contact(contact_id, json_body())
    return jsonify({"success": True, "contact": contact})


@bp.route("/<contact_id>", methods=["DELETE"])
def delete_contact(contact_id):
    service(ContactService).delete_contact(contact_id)
    return jsonify({"success": True})


@bp.route("/<contact_id>/interactions", methods=["GET"])
def list_interactions(contact_id):
    return jsonify({"success": True, "interactions": service(ContactService).list_interactions(contact_id)})


@bp.route("/<contact_id>/interactions", methods=["POST"])
def log_interaction(contact_id):
    data = {**json_body("interaction_type"), "contact_id": contact_id}
    interaction = service(ContactService).log_interaction(data)
    return jsonify({"success": True, "interaction": interaction}), 201


@bp.route("/<contact_id>/follow-up", methods=["POST"])
def set_follow_up(contact_id):
    value = json_body().get("next_follow_up")
    follow_up = date.fromisoformat(value) if value else None
    return jsonify({"success": True, "contact": service(ContactService).set_follow_up(contact_id, follow_up)})


@bp.route("/<contact_id>/health", methods=["GET"])
def relationship_health(contact_id):
    contacts = service(ContactService)
    functions = FunctionsService(contacts.client, extension()["cache"])
    return jsonify({"success": True, "health": contacts.relationship_health(contact_id, functions)})


@bp.route("/<contact_id>/follow-up-template", methods=["POST"])
def follow_up_template(contact_id):
    contacts = service(ContactService)
    functions = FunctionsService(contacts.client, extension()["cache"])
    template = contacts.follow_up_template(contact_id, json_body().get("context"), functions)
    return jsonify({"success": True, "template": template})
