# gymxp/services/store.py
"""
Frontera con la BD: cualquier SQLAlchemyError (lectura o escritura) hace
rollback, se registra y sale como PersistenceFailure.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from gymxp import db
from gymxp.errors import PersistenceFailure

logger = logging.getLogger(__name__)


def commit() -> None:
    """Commit con rollback + log; la BD caída no tumba la app (PersistenceFailure)."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Fallo de persistencia: %s", e)
        raise PersistenceFailure("No se pudo guardar el cambio; inténtalo más tarde") from e


@contextmanager
def guarded_read(what: str):
    """with guarded_read("ledger user=3"): ...consultas..."""
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Fallo leyendo %s: %s", what, e)
        raise PersistenceFailure(f"No se pudo leer {what}; inténtalo más tarde") from e
