# run.py
"""Punto de entrada: `python run.py` (desarrollo) o `gunicorn run:app`."""
import os

from gymxp import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", 5000)),
        debug=os.getenv("FLASK_DEBUG", "0") == "1",
    )
