# gymxp/errors.py
"""
Taxonomía de errores del motor de progreso / XP / ranking.

- Excepciones (se lanzan): ValidationError, LocationUnavailable, PersistenceFailure.
- Avisos (se adjuntan al resultado, nunca se lanzan): CapReached, NoUsersFound.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class EngineError(Exception):
    error_code = "engine_error"
    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error_code": self.error_code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ValidationError(EngineError):
    """Valor no numérico / no positivo, fecha o unidad inválidas. Nada se escribe."""
    error_code = "validation_error"
    status_code = 400


class LocationUnavailable(EngineError):
    """Ranking geográfico pedido sin ubicación resoluble."""
    error_code = "location_unavailable"
    status_code = 409


class PersistenceFailure(EngineError):
    """La BD rechazó una lectura o escritura."""
    error_code = "persistence_failure"
    status_code = 503


class Notice:
    code = "notice"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code}

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.to_dict()}>"


class CapReached(Notice):
    """El día ya tenía el máximo de XP: el registro se guarda pero no suma."""
    code = "cap_reached"

    def __init__(self, date_iso: str, cap: int = 100):
        self.date = date_iso
        self.cap = cap

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "date": self.date, "cap": self.cap}


class NoUsersFound(Notice):
    """El filtro de la dimensión no deja candidatos (p. ej. no sigues a nadie)."""
    code = "no_users_found"

    def __init__(self, dimension: str, reason: Optional[str] = None):
        self.dimension = dimension
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "dimension": self.dimension}
        if self.reason:
            out["reason"] = self.reason
        return out
