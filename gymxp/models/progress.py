# gymxp/models/progress.py
from datetime import datetime, timezone

from gymxp import db


class ProgressRecord(db.Model):
    """Un registro de entreno (usuario, nombre de entreno, fecha). Último en escribir gana."""
    __tablename__ = "progress_records"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_name = db.Column(db.String(80), nullable=False)
    date = db.Column(db.String(10), nullable=False, index=True)   # YYYY-MM-DD

    value = db.Column(db.Float, nullable=False, default=0.0)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    unit = db.Column(db.String(16), nullable=False)
    intensity = db.Column(db.String(40))                 # opcional
    calories = db.Column(db.Integer)                     # kcal estimadas (informativo)
    is_additional = db.Column(db.Boolean, nullable=False, default=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "workout_name", "date", name="uq_progress_user_workout_date"),
    )

    def to_dict(self) -> dict:
        return {
            "workout": self.workout_name,
            "date": self.date,
            "value": self.value,
            "completed": bool(self.completed),
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "unit": self.unit,
            "intensity": self.intensity,
            "calories": self.calories,
            "is_additional": bool(self.is_additional),
        }

    def __repr__(self):
        return f"<ProgressRecord {self.user_id} {self.workout_name} {self.date} v={self.value}>"
