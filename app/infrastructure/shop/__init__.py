"""
Infrastructure adapters for the shop bounded context.

Each adapter implements a domain port (ABC) and connects
to an external system: PostgreSQL, bcrypt, JWT, WebSocket
clients and the e-mail relay.
"""
