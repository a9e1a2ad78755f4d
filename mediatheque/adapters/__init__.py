"""
Couche adaptateurs.

Les adaptateurs implementent les ports definis dans core/ports/ :
- api/ : scraper TMDB (httpx + cache diskcache)
- cli/ : interface ligne de commande (Typer + Rich)

core/ ne depend jamais des adaptateurs.
"""
