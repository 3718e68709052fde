# gymxp/cli/__init__.py
from .xp import xp_group
from .export import export_group


def register_cli(app):
    """Registra los grupos y comandos CLI de la app."""
    app.cli.add_command(xp_group)
    app.cli.add_command(export_group)
