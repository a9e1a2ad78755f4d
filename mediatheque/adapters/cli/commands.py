"""
Commandes CLI de la mediatheque.

- refresh : purge, scan puis scraping
- purge / scrape : etapes individuelles
- list / show : consultation du catalogue
- watched : marquer vu / non vu
- progress : position de lecture transmise par le lecteur
- collection : gestion des collections (sous-commandes)
"""

from enum import Enum
from typing import Annotated, Optional

import typer
from rich.table import Table

from mediatheque.adapters.cli.helpers import console, exit_on_error, open_library, run_async
from mediatheque.core.entities.media import (
    CollectionId,
    Episode,
    Media,
    MediaId,
    Movie,
    Season,
    Series,
    Uncategorised,
    WatchState,
    get_video,
    media_poster,
    media_year,
)
from mediatheque.services import navigation
from mediatheque.services.catalog import Catalog
from mediatheque.services.collections import collections_containing
from mediatheque.services.watched import calculate_watched


class MediaKind(str, Enum):
    """Filtre de type pour la commande list."""

    ALL = "all"
    MOVIES = "movies"
    SERIES = "series"
    SEASONS = "seasons"
    EPISODES = "episodes"
    UNCATEGORISED = "uncategorised"


_KIND_TYPES = {
    MediaKind.MOVIES: Movie,
    MediaKind.SERIES: Series,
    MediaKind.SEASONS: Season,
    MediaKind.EPISODES: Episode,
    MediaKind.UNCATEGORISED: Uncategorised,
}

_KIND_LABELS = {
    Movie: "Film",
    Series: "Serie",
    Season: "Saison",
    Episode: "Episode",
    Uncategorised: "Non identifie",
}

_WATCHED_LABELS = {
    WatchState.NO: "[dim]non vu[/dim]",
    WatchState.PARTIAL: "[yellow]en cours[/yellow]",
    WatchState.YES: "[green]vu[/green]",
}


def _watched_label(media_id: MediaId, catalog: Catalog) -> str:
    watched = calculate_watched(media_id, catalog)
    if watched is None:
        return ""
    if watched.state == WatchState.PARTIAL:
        return f"[yellow]{watched.percent:.0%}[/yellow]"
    return _WATCHED_LABELS[watched.state]


def refresh(
    no_scan: Annotated[
        bool,
        typer.Option("--no-scan", help="Ne pas scanner les repertoires (purge + scraping)"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Rescraper aussi les fichiers deja tentes"),
    ] = False,
) -> None:
    """
    Rafraichit la mediatheque : purge, scan puis identification TMDB.

    Exemples:
      mediatheque refresh
      mediatheque refresh --no-scan --force
    """
    with exit_on_error(), open_library() as service:
        report = run_async(service, service.refresh(scan=not no_scan, force=force))

    console.print(f"[bold]Retires:[/bold] {len(report.removed)}")
    console.print(f"[bold]Ajoutes:[/bold] {len(report.added)}")
    if report.scrape_skipped:
        console.print("[yellow]Scraping desactive (MEDIATHEQUE_TMDB_API_KEY absente)[/yellow]")
    else:
        console.print(f"[bold]Identifies:[/bold] {len(report.identified)}")


def purge() -> None:
    """Retire du catalogue les medias dont le fichier a disparu."""
    with exit_on_error(), open_library() as service:
        removed = run_async(service, service.purge())
        service.save()
    console.print(f"{len(removed)} media(s) retire(s)")


def scrape(
    force: Annotated[
        bool,
        typer.Option("--force", help="Rescraper aussi les fichiers deja tentes"),
    ] = False,
) -> None:
    """Identifie les fichiers non identifies via TMDB."""
    with exit_on_error(), open_library() as service:
        identified = run_async(service, service.scrape(force=force))
        service.save()
    if identified is None:
        console.print("[yellow]Scraping desactive (MEDIATHEQUE_TMDB_API_KEY absente)[/yellow]")
        return
    console.print(f"{len(identified)} fichier(s) identifie(s)")


def list_media(
    kind: Annotated[
        MediaKind,
        typer.Option("--kind", "-k", case_sensitive=False, help="Type de media a afficher"),
    ] = MediaKind.ALL,
    query: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Filtrer par titre"),
    ] = None,
    recent: Annotated[
        bool,
        typer.Option("--recent", help="Fichiers ajoutes ces 7 derniers jours"),
    ] = False,
    in_progress: Annotated[
        bool,
        typer.Option("--in-progress", help="Videos en cours de visionnage"),
    ] = False,
) -> None:
    """
    Liste le contenu du catalogue.

    Exemples:
      mediatheque list --kind movies
      mediatheque list --in-progress
      mediatheque list -s "breaking"
    """
    with exit_on_error(), open_library() as service:
        catalog = service.catalog

    if in_progress:
        selected = navigation.keep_watching(catalog, limit=None)
    elif recent:
        selected = navigation.recently_added(catalog, limit=None)
    elif query:
        selected = navigation.search(catalog, query)
    else:
        selected = list(catalog)

    media_type = _KIND_TYPES.get(kind)
    rows = [
        (media_id, catalog.get(media_id))
        for media_id in selected
        if media_type is None or isinstance(catalog.get(media_id), media_type)
    ]
    if not rows:
        console.print("[yellow]Aucun media.[/yellow]")
        return

    table = Table(title=f"Mediatheque ({len(rows)})")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Type")
    table.add_column("Titre")
    table.add_column("Annee", justify="right")
    table.add_column("Vu")
    for media_id, media in rows:
        year = media_year(media)
        table.add_row(
            str(media_id),
            _KIND_LABELS[type(media)],
            navigation.full_title(media_id, catalog),
            str(year) if year else "",
            _watched_label(media_id, catalog),
        )
    console.print(table)


def _describe(media_id: MediaId, media: Media, catalog: Catalog) -> list[str]:
    lines = [
        f"[bold]{navigation.full_title(media_id, catalog)}[/bold]",
        f"Type: {_KIND_LABELS[type(media)]}",
    ]
    video = get_video(media)
    if video is not None:
        lines.append(f"Fichier: {video.path}")
    poster = media_poster(media)
    if poster is not None:
        lines.append(f"Poster: {poster}")
    added = navigation.date_added(media_id, catalog)
    if added is not None:
        lines.append(f"Ajoute le: {added:%Y-%m-%d %H:%M}")
    watched = navigation.last_watched(media_id, catalog)
    if watched is not None:
        lines.append(f"Vu le: {watched:%Y-%m-%d %H:%M}")
    lines.append(f"Progression: {_watched_label(media_id, catalog)}")

    if isinstance(media, Series):
        for season_id, season in sorted(
            navigation.find_seasons(media_id, catalog), key=lambda pair: pair[1].metadata.season
        ):
            lines.append(f"  [{season_id}] {season.metadata.title}")
    elif isinstance(media, Season):
        for episode_id, episode in sorted(
            navigation.find_episodes(media_id, catalog), key=lambda pair: pair[1].metadata.episode
        ):
            lines.append(
                f"  [{episode_id}] E{episode.metadata.episode:02d} {episode.metadata.title}"
            )
    elif isinstance(media, Episode):
        previous_id = navigation.previous_in_list(media_id, catalog)
        next_id = navigation.next_in_list(media_id, catalog)
        if previous_id is not None:
            lines.append(f"Precedent: [{previous_id}] {navigation.full_title(previous_id, catalog)}")
        if next_id is not None:
            lines.append(f"Suivant: [{next_id}] {navigation.full_title(next_id, catalog)}")

    collection_names = [
        catalog.collection(collection_id).name
        for collection_id in collections_containing(catalog, media_id)
    ]
    if collection_names:
        lines.append(f"Collections: {', '.join(collection_names)}")
    return lines


def show(
    media_id: Annotated[int, typer.Argument(help="Identifiant du media")],
) -> None:
    """Affiche le detail d'un media."""
    with exit_on_error(), open_library() as service:
        catalog = service.catalog
        media = catalog.get(MediaId(media_id))
        if media is None:
            console.print(f"[red]Media introuvable: {media_id}[/red]")
            raise typer.Exit(1)

    for line in _describe(MediaId(media_id), media, catalog):
        console.print(line)


def watched(
    media_id: Annotated[int, typer.Argument(help="Identifiant du media")],
    value: Annotated[
        bool,
        typer.Option("--yes/--no", help="Marquer vu (--yes) ou non vu (--no)"),
    ] = True,
) -> None:
    """Marque un media comme vu ou non vu (propage aux episodes)."""
    with exit_on_error(), open_library() as service:
        updated = service.set_watched(MediaId(media_id), value)
        service.save()
        title = navigation.full_title(MediaId(media_id), service.catalog)
    state = "vu" if value else "non vu"
    console.print(f"{title}: {state} ({len(updated)} fichier(s))")


def progress(
    media_id: Annotated[int, typer.Argument(help="Identifiant du media")],
    position: Annotated[float, typer.Argument(min=0, help="Position de lecture en secondes")],
    duration: Annotated[float, typer.Argument(min=0, help="Duree totale en secondes")],
) -> None:
    """Enregistre la position de lecture d'une video (appele par le lecteur)."""
    with exit_on_error(), open_library() as service:
        result = service.record_progress(MediaId(media_id), position, duration)
        service.save()
        title = navigation.full_title(MediaId(media_id), service.catalog)
    if result.state == WatchState.YES:
        console.print(f"{title}: vu")
    else:
        console.print(f"{title}: {result.percent:.0%}")


collection_app = typer.Typer(help="Gestion des collections")


@collection_app.command("create")
def collection_create(
    name: Annotated[Optional[str], typer.Argument(help="Nom de la collection")] = None,
) -> None:
    """Cree une collection."""
    with exit_on_error(), open_library() as service:
        collection_id = service.create_collection(name)
        service.save()
    console.print(f"Collection creee: {collection_id}")


@collection_app.command("rename")
def collection_rename(
    collection_id: Annotated[int, typer.Argument(help="Identifiant de la collection")],
    name: Annotated[str, typer.Argument(help="Nouveau nom")],
) -> None:
    """Renomme une collection."""
    with exit_on_error(), open_library() as service:
        service.rename_collection(CollectionId(collection_id), name)
        service.save()
    console.print(f"Collection {collection_id} renommee")


@collection_app.command("delete")
def collection_delete(
    collection_id: Annotated[int, typer.Argument(help="Identifiant de la collection")],
) -> None:
    """Supprime une collection (les medias sont conserves)."""
    with exit_on_error(), open_library() as service:
        removed = service.delete_collection(CollectionId(collection_id))
        service.save()
    console.print(f"Collection supprimee: {removed.name}")


@collection_app.command("toggle")
def collection_toggle(
    collection_id: Annotated[int, typer.Argument(help="Identifiant de la collection")],
    media_id: Annotated[int, typer.Argument(help="Identifiant du media")],
) -> None:
    """Ajoute un media a une collection, ou l'en retire."""
    with exit_on_error(), open_library() as service:
        member = service.toggle_membership(CollectionId(collection_id), MediaId(media_id))
        service.save()
    console.print("Ajoute a la collection" if member else "Retire de la collection")


@collection_app.command("list")
def collection_list() -> None:
    """Liste les collections et leurs medias."""
    with exit_on_error(), open_library() as service:
        catalog = service.catalog

    collections = list(catalog.collections())
    if not collections:
        console.print("[yellow]Aucune collection.[/yellow]")
        return

    table = Table(title="Collections")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Nom")
    table.add_column("Medias")
    for collection_id, collection in collections:
        titles = [navigation.full_title(media_id, catalog) for media_id in sorted(collection)]
        table.add_row(str(collection_id), collection.name, ", ".join(titles))
    console.print(table)
