# testgenium/middleware/security_headers.py
"""
Security headers middleware
Implements OWASP recommendations
"""
from fastapi import Request


async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses"""

    response = await call_next(request)

    # Prevent clickjacking
    response.headers["X-Frame-Options"] = "DENY"

    # Prevent MIME type sniffing
    response.headers["X-Content-Type-Options"] = "nosniff"

    # The API serves JSON only
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

    # Strict Transport Security (HTTPS only)
    response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cross-Origin-Resource-Policy"] = "same-origin"

    return response
