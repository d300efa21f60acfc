"""
Domain layer package.

Contains pure business logic: entities, validators and port
interfaces. No framework imports, no IO, no side effects.
"""
