"""
Point d'entree CLI de la mediatheque.

Configure le logging selon les options de verbosite et monte les commandes.
"""

from typing import Annotated

import typer

from .adapters.cli.commands import (
    collection_app,
    list_media,
    progress,
    purge,
    refresh,
    scrape,
    show,
    watched,
)
from .config import Settings
from .logging_config import configure_logging

app = typer.Typer(
    name="mediatheque",
    help="Catalogue personnel de films et de series",
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Afficher les logs de debug"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """Mediatheque - catalogue de films et de series."""
    settings = Settings()
    if quiet:
        log_level = "ERROR"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = settings.log_level
    configure_logging(
        log_level=log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


app.command()(refresh)
app.command()(purge)
app.command()(scrape)
app.command(name="list")(list_media)
app.command()(show)
app.command()(watched)
app.command()(progress)
app.add_typer(collection_app, name="collection")


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    settings = Settings()
    typer.echo(f"Stockage : {settings.storage_dir}")
    typer.echo(f"Repertoires : {', '.join(str(d) for d in settings.directories) or '(aucun)'}")
    typer.echo(f"API TMDB : {'activee' if settings.tmdb_enabled else 'desactivee'}")
    typer.echo(f"Niveau de log : {settings.log_level}")


def main() -> None:
    """Point d'entree de l'application."""
    app()


if __name__ == "__main__":
    main()
