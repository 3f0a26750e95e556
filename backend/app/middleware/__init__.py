# Middleware package init
"""
CareNotes Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [CORS] → [Logging] → [Rate Limit] → [API Key]
            → [GZip] → Route Handler

    1. Request ID first: every response, including 401/429 rejections and
       CORS preflights, carries X-Request-ID
    2. CORS: answers preflight OPTIONS before authentication
    3. Logging: records every request, including rejected ones
    4. Rate Limit: counts /api requests per API key (or client IP)
    5. API Key: rejects /api requests without a valid x-api-key

    The order is reversed for responses.
"""
