"""
Couche domaine (core).

Contient les entites metier, ports (interfaces abstraites), objets valeur
et exceptions. Cette couche n'a AUCUNE dependance vers l'infrastructure.

Sous-packages :
- entities/ : Entites metier (Media et ses variantes, Collection)
- ports/ : Interfaces abstraites (IScraper, ICatalogStorage)
- value_objects/ : Objets valeur immutables (resultat de classification)
"""
