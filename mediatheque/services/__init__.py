"""
Application services layer (use cases).

Services orchestrate the catalog logic: identity store, filesystem scan and
purge, filename classification, scraping and merge, watched aggregation,
navigation and collections.

Scan, purge and scrape only produce data; every mutation of the Catalog goes
through LibraryService, the single writer.
"""
