"""
Shop bounded context: domain layer.

Entities, port interfaces, field validators, and the exception
hierarchy of the raise-based product path.
"""
