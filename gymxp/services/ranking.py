# gymxp/services/ranking.py
"""
Motor de ranking sobre snapshots desnormalizados.

Orden SIEMPRE por total_xp desc (desempate: user_id asc), sea cual sea la ventana;
la ventana (daily/weekly/monthly) solo decide el XP que se muestra.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from gymxp.errors import LocationUnavailable, NoUsersFound, ValidationError
from gymxp.services.store import guarded_read
from gymxp.utils.geo import has_fix, haversine
from gymxp.utils.geocode import UNKNOWN
from gymxp.utils.levels import level_of

logger = logging.getLogger(__name__)

DIMENSIONS = ("global", "continental", "country", "regional", "followers")
WINDOW_FIELDS = {
    "overall": "total_xp",
    "monthly": "monthly_xp",
    "weekly": "weekly_xp",
    "daily": "daily_xp",
}
DEFAULT_LIMIT = 100
REGIONAL_RADIUS_KM = 100.0


@dataclass(frozen=True)
class RankingRow:
    user_id: int
    username: str
    theme: str = "default"
    total_xp: int = 0
    daily_xp: int = 0
    weekly_xp: int = 0
    monthly_xp: int = 0
    country: str = UNKNOWN
    continent: str = UNKNOWN
    lat: Optional[float] = None
    lon: Optional[float] = None


@dataclass(frozen=True)
class Requester:
    user_id: int
    country: Optional[str] = None
    continent: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    following: FrozenSet[int] = frozenset()


@dataclass
class LeaderboardEntry:
    rank: int
    user_id: int
    username: str
    theme: str
    xp: int
    total_xp: int
    level: int
    is_current_user: bool = False
    is_followed: bool = False
    distance_km: Optional[float] = None

    def to_dict(self) -> dict:
        out = {
            "rank": self.rank,
            "user_id": self.user_id,
            "username": self.username,
            "theme": self.theme,
            "xp": self.xp,
            "total_xp": self.total_xp,
            "level": self.level,
            "is_current_user": self.is_current_user,
            "is_followed": self.is_followed,
        }
        if self.distance_km is not None:
            out["distance_km"] = round(self.distance_km, 2)
        return out


@dataclass
class LeaderboardView:
    dimension: str
    window: str
    entries: List[LeaderboardEntry] = field(default_factory=list)
    filter_value: Optional[str] = None
    notice: Optional[NoUsersFound] = None

    def to_dict(self) -> dict:
        return {
            "dimension": self.dimension,
            "window": self.window,
            "filter": self.filter_value,
            "entries": [e.to_dict() for e in self.entries],
            "notice": self.notice.to_dict() if self.notice else None,
        }


def _resolvable(place: Optional[str]) -> bool:
    return bool(place) and place.strip() != "" and place.strip() != UNKNOWN


def _sort_key(row: RankingRow):
    return (-int(row.total_xp or 0), row.user_id)


def build_leaderboard(
    rows: Iterable[RankingRow],
    requester: Requester,
    dimension: str = "global",
    window: str = "overall",
    *,
    continent: Optional[str] = None,
    country: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    radius_km: float = REGIONAL_RADIUS_KM,
) -> LeaderboardView:
    """
    Construye la vista de ranking (pura, determinista).

      1) selección de candidatos por dimensión
      2) orden por total_xp desc, user_id asc
      3) tope de `limit` candidatos
      4) post-filtro (regional: distancia <= radius_km)
      5) rangos 1..n sobre lo que sobrevive
    """
    if dimension not in DIMENSIONS:
        raise ValidationError(f"dimension inválida; usa una de {', '.join(DIMENSIONS)}", dimension=dimension)
    if window not in WINDOW_FIELDS:
        raise ValidationError(f"window inválida; usa una de {', '.join(WINDOW_FIELDS)}", window=window)

    display_field = WINDOW_FIELDS[window]
    view = LeaderboardView(dimension=dimension, window=window)
    candidates = list(rows)

    if dimension == "continental":
        place = continent if continent is not None else requester.continent
        if not _resolvable(place):
            raise LocationUnavailable("No hay continente resoluble para el ranking", dimension=dimension)
        view.filter_value = place
        candidates = [r for r in candidates if r.continent == place]

    elif dimension == "country":
        place = country if country is not None else requester.country
        if not _resolvable(place):
            raise LocationUnavailable("No hay país resoluble para el ranking", dimension=dimension)
        view.filter_value = place
        candidates = [r for r in candidates if r.country == place]

    elif dimension == "regional":
        if not has_fix(requester.lat, requester.lon):
            raise LocationUnavailable("Activa la ubicación para ver el ranking regional", dimension=dimension)
        view.filter_value = f"{radius_km:g}km"
        candidates = [r for r in candidates if has_fix(r.lat, r.lon)]

    elif dimension == "followers":
        if not requester.following:
            view.notice = NoUsersFound(dimension, reason="not_following_anyone")
            return view
        candidates = [r for r in candidates if r.user_id in requester.following]

    candidates.sort(key=_sort_key)
    candidates = candidates[: max(0, int(limit))]

    distances: Dict[int, float] = {}
    if dimension == "regional":
        for r in candidates:
            distances[r.user_id] = haversine(requester.lat, requester.lon, r.lat, r.lon)
        candidates = [r for r in candidates if distances[r.user_id] <= radius_km]

    for i, r in enumerate(candidates, start=1):
        view.entries.append(
            LeaderboardEntry(
                rank=i,
                user_id=r.user_id,
                username=r.username,
                theme=r.theme,
                xp=int(getattr(r, display_field) or 0),
                total_xp=int(r.total_xp or 0),
                level=level_of(r.total_xp).level,
                is_current_user=(r.user_id == requester.user_id),
                is_followed=(r.user_id in requester.following),
                distance_km=distances.get(r.user_id),
            )
        )

    if not view.entries:
        view.notice = NoUsersFound(dimension)
    return view


# -------------------------------------------------------------------
# Adaptador BD
# -------------------------------------------------------------------
def snapshot_to_row(s) -> RankingRow:
    return RankingRow(
        user_id=s.user_id,
        username=s.username,
        theme=s.theme or "default",
        total_xp=int(s.total_xp or 0),
        daily_xp=int(s.daily_xp or 0),
        weekly_xp=int(s.weekly_xp or 0),
        monthly_xp=int(s.monthly_xp or 0),
        country=s.country or UNKNOWN,
        continent=s.continent or UNKNOWN,
        lat=s.lat,
        lon=s.lon,
    )


def requester_for(user) -> Requester:
    return Requester(
        user_id=user.id,
        country=user.country,
        continent=user.continent,
        lat=user.lat,
        lon=user.lon,
        following=user.following_ids(),
    )


def load_rows(dimension: str, requester: Requester, *, continent=None, country=None) -> List[RankingRow]:
    """Lee snapshots con el pre-filtro que la BD puede resolver; el resto lo hace build_leaderboard."""
    from gymxp.models.ranking import RankingSnapshot

    q = RankingSnapshot.query
    if dimension == "continental":
        place = continent if continent is not None else requester.continent
        q = q.filter(RankingSnapshot.continent == place)
    elif dimension == "country":
        place = country if country is not None else requester.country
        q = q.filter(RankingSnapshot.country == place)
    elif dimension == "regional":
        q = q.filter(RankingSnapshot.lat.isnot(None), RankingSnapshot.lon.isnot(None))
    elif dimension == "followers":
        if not requester.following:
            return []
        q = q.filter(RankingSnapshot.user_id.in_(list(requester.following)))
    with guarded_read(f"ranking {dimension}"):
        rows = q.order_by(RankingSnapshot.total_xp.desc(), RankingSnapshot.user_id.asc()).all()
    return [snapshot_to_row(s) for s in rows]


def leaderboard_for(user, dimension="global", window="overall", *, continent=None, country=None,
                    limit=DEFAULT_LIMIT, radius_km=REGIONAL_RADIUS_KM) -> LeaderboardView:
    with guarded_read(f"seguidos user={user.id}"):
        requester = requester_for(user)
    rows = load_rows(dimension, requester, continent=continent, country=country)
    view = build_leaderboard(
        rows, requester, dimension, window,
        continent=continent, country=country, limit=limit, radius_km=radius_km,
    )
    logger.debug("leaderboard %s/%s user=%s -> %d entradas", dimension, window, user.id, len(view.entries))
    return view
