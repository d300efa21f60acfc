"""
Interfaces layer package.

Contains FastAPI routers, Pydantic request/response schemas and
WebSocket endpoints. No business logic belongs here.
Routes call services and project their Result into a response.
"""
