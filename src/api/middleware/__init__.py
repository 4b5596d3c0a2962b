"""Middleware and exception handlers applied to every request.

Registered so that requests pass through them in this order:
1. Security headers
2. Request context (correlation id)
3. Request logging
Exception handlers turn errors into ErrorResponse bodies underneath.
"""
