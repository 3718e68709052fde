# gymxp/services/social.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from gymxp.errors import ValidationError
from gymxp.services.engine import EngineContext, sync_user
from gymxp.services.store import commit
from gymxp.utils.geo import has_fix
from gymxp.utils.geocode import UNKNOWN, reverse_geocode

logger = logging.getLogger(__name__)


def follow(user, target) -> bool:
    """user sigue a target. False si ya lo seguía."""
    if target.id == user.id:
        raise ValidationError("No puedes seguirte a ti mismo")
    if target in user.following:
        return False
    user.following.append(target)
    commit()
    return True


def unfollow(user, target) -> bool:
    if target not in user.following:
        return False
    user.following.remove(target)
    commit()
    return True


def update_location(
    ctx: EngineContext,
    user,
    lat,
    lon,
    country: Optional[str] = None,
    continent: Optional[str] = None,
    geocode: bool = True,
    geocoder_url: Optional[str] = None,
    geocoder_timeout: float = 5,
):
    """
    Guarda la posición; país/continente vienen del cliente o se resuelven por
    geocodificación inversa. Refresca el snapshot de ranking.
    """
    if not has_fix(lat, lon):
        raise ValidationError("lat/lon inválidas", lat=lat, lon=lon)
    lat, lon = float(lat), float(lon)

    if not (country and continent) and geocode:
        kwargs = {"timeout": geocoder_timeout}
        if geocoder_url:
            kwargs["url"] = geocoder_url
        info = reverse_geocode(lat, lon, **kwargs)
        country = country or info["country"]
        continent = continent or info["continent"]

    user.lat, user.lon = lat, lon
    user.country = (country or "").strip() or UNKNOWN
    user.continent = (continent or "").strip() or UNKNOWN
    user.location_updated_at = datetime.now(timezone.utc)
    commit()
    logger.info("ubicación user=%s -> %s / %s", user.id, user.country, user.continent)

    sync_user(ctx, user)
    return user
