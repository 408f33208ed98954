"""Sign in, sign up and sign out."""

from flask import Blueprint, jsonify

from careerhub.exceptions import AuthError
from careerhub.utils.logger import get_logger
from careerhub.web.helpers import clear_session, current_session, extension, json_body, store_session, user_client


logger = get_logger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.route("/signin", methods=["POST"])
def sign_in():
    data = json_body("email", "password")
    client = extension()["client"].with_session(None)
    auth = client.auth.sign_in_with_password(data["email"], data["password"])
    store_session(auth)
    return jsonify({"success": True, "user": auth.user})


@bp.route("/signup", methods=["POST"])
def sign_up():
    data = json_body("email", "password")
    if len(data["password"]) < 6:
        raise ValueError("Password must be at least 6 characters")

    client = extension()["client"].with_session(None)
    payload = client.auth.sign_up(data["email"], data["password"], data.get("data"))
    if client.auth.session is not None:
        store_session(client.auth.session)
    user = payload.get("user") or {k: v for k, v in payload.items() if k in ("id", "email")}
    return jsonify({
        "success": True,
        "user": user,
        "confirmation_required": client.auth.session is None,
    }), 201


@bp.route("/signout", methods=["POST"])
def sign_out():
    if current_session() is not None:
        try:
            user_client().auth.sign_out()
        except AuthError as e:
            # Expired or revoked tokens still end the local session
            logger.warning(f"⚠️ Sign out rejected by backend: {e.message}")
        finally:
            clear_session()
    return jsonify({"success": True})


@bp.route("/user", methods=["GET"])
def get_user():
    client = user_client()
    return jsonify({"success": True, "user": client.auth.get_user()})
