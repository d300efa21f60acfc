"""
Application layer package.

Contains the services that orchestrate domain logic. Expected failures
travel as Result values; services never raise for them.
This layer depends on domain ports, never on infrastructure.
"""
