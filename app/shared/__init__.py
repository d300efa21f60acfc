"""
Shared module package.

Contains cross-cutting concerns used across bounded contexts:
- The Result type and the Unit marker
- Error taxonomy, projection and exception handlers
- Security middleware
- Rate limiting
- Logging configuration
"""
