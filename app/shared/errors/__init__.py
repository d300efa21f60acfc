"""
Shared error handling package.

Holds the AppError taxonomy carried by failed Results, the projector
that turns Results into HTTP and WebSocket responses, and the exception
handlers for the raise-based product path and unexpected faults.
"""
