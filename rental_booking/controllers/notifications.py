from flask import Blueprint, jsonify, request

from ..services.notification_service import NotificationService
from ..utils.decorators import json_body, pick

bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@bp.get("")
def latest_notifications():
    """Latest notifications for `?user=`; without it, everything (admin view)."""
    owner = (request.args.get("user") or "").strip() or None
    return jsonify([n.to_json() for n in NotificationService.latest(owner_id=owner)])


@bp.put("/seen")
@json_body
def mark_seen(body):
    owner = pick(body, "user", "owner_id", "userId")
    if not owner:
        return jsonify({"error": "Required: user."}), 400
    updated = NotificationService.mark_seen(str(owner))
    return jsonify({"success": True, "updated": updated})
