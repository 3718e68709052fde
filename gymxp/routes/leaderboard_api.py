# gymxp/routes/leaderboard_api.py
from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from gymxp.services.ranking import leaderboard_for

leaderboard_bp = Blueprint("leaderboard_api", __name__, url_prefix="/api")


@leaderboard_bp.route("/leaderboard", methods=["GET"])
@login_required
def get_leaderboard():
    """
    GET /api/leaderboard?dimension=global|continental|country|regional|followers
                        &window=overall|monthly|weekly|daily
                        &continent=Europe&country=Spain   (opcionales)
    """
    dimension = (request.args.get("dimension") or "global").strip().lower()
    window = (request.args.get("window") or "overall").strip().lower()
    continent = (request.args.get("continent") or "").strip() or None
    country = (request.args.get("country") or "").strip() or None

    view = leaderboard_for(
        current_user,
        dimension,
        window,
        continent=continent,
        country=country,
        limit=current_app.config.get("LEADERBOARD_LIMIT", 100),
        radius_km=current_app.config.get("REGIONAL_RADIUS_KM", 100.0),
    )
    return jsonify({"data": view.to_dict()})
