# gymxp/models/user.py

from datetime import datetime, timezone

from flask_login import UserMixin
from gymxp import db, login_manager


# ---- Grafo social (seguidor -> seguido) ----
follows = db.Table(
    "follows",
    db.Column("follower_id", db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
    db.Column("followed_id", db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = "user"

    id       = db.Column(db.Integer, primary_key=True)
    email    = db.Column(db.String(150), unique=True, nullable=False)
    username = db.Column(db.String(80), nullable=False)
    password = db.Column(db.String(255), nullable=False)
    theme    = db.Column(db.String(32), nullable=False, default="default")
    weight_kg = db.Column(db.Float, nullable=True)

    # Agregado de XP (derivado del ledger; nunca se edita a mano)
    total_xp = db.Column(db.Integer, nullable=False, default=0)
    daily_xp = db.Column(db.JSON, nullable=False, default=dict)   # {"YYYY-MM-DD": xp}

    # Rachas (derivadas del ledger)
    streak      = db.Column(db.Integer, nullable=False, default=0)
    best_streak = db.Column(db.Integer, nullable=False, default=0)

    # Ubicación
    country   = db.Column(db.String(80), nullable=False, default="Unknown")
    continent = db.Column(db.String(40), nullable=False, default="Unknown")
    lat       = db.Column(db.Float, nullable=True)
    lon       = db.Column(db.Float, nullable=True)
    location_updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    following = db.relationship(
        "User",
        secondary=follows,
        primaryjoin=(follows.c.follower_id == id),
        secondaryjoin=(follows.c.followed_id == id),
        backref=db.backref("followers", lazy="select"),
        lazy="select",
    )

    # ---- Helpers ----
    def following_ids(self) -> frozenset:
        return frozenset(u.id for u in self.following)

    def follower_ids(self) -> frozenset:
        return frozenset(u.id for u in self.followers)

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "theme": self.theme,
            "total_xp": self.total_xp,
            "country": self.country,
            "continent": self.continent,
        }

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username} xp={self.total_xp}>"


# Loader para Flask-Login
@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))
