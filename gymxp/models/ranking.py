# gymxp/models/ranking.py
from datetime import datetime, timezone

from gymxp import db


class RankingSnapshot(db.Model):
    """Proyección desnormalizada por usuario; solo la lee el motor de ranking."""
    __tablename__ = "ranking_snapshots"

    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    username = db.Column(db.String(80), nullable=False)
    theme = db.Column(db.String(32), nullable=False, default="default")

    total_xp = db.Column(db.Integer, nullable=False, default=0, index=True)
    daily_xp = db.Column(db.Integer, nullable=False, default=0)     # XP de "hoy"
    weekly_xp = db.Column(db.Integer, nullable=False, default=0)
    monthly_xp = db.Column(db.Integer, nullable=False, default=0)

    country = db.Column(db.String(80), nullable=False, default="Unknown", index=True)
    continent = db.Column(db.String(40), nullable=False, default="Unknown", index=True)
    lat = db.Column(db.Float)
    lon = db.Column(db.Float)

    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<RankingSnapshot {self.user_id} total={self.total_xp}>"
