"""
Application layer for the shop bounded context.

Services coordinate domain entities and ports to fulfill
business operations. No framework or infrastructure imports allowed.
"""
