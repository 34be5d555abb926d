# Middleware package init
"""
Photo Gallery — Middleware Package
====================================

Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Security Headers] → [GZip] → [CORS] → Route

    1. Request ID first: every later log line can be correlated
    2. Logging: method, path, status and duration with the request ID
    3. Security headers: nosniff / frame / referrer policy on every response
"""
