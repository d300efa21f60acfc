"""
Storefront API: a teaching e-commerce backend.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - shop: Categories, products, users, authentication and orders.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), validators.
    - application: Services returning Result values, DTOs, mappers.
    - infrastructure: Adapters (database, hashing, tokens, notifications).
    - interfaces: FastAPI routers, Pydantic schemas, WebSocket endpoints.
    - shared: Cross-cutting concerns (Result, errors, security, logging).
"""
