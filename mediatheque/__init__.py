"""
Mediatheque - Catalogue personnel de films et de series.

Ce package construit un catalogue a partir des fichiers video presents sur
le disque et l'enrichit avec les metadonnees TMDB.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur, exceptions)
- services/ : Couche application (catalogue, scan, scraping, fusion, visionnage)
- infrastructure/ : Persistance du catalogue (snapshot JSON)
- adapters/ : Couche infrastructure (CLI, client TMDB)
"""
