# File: src/triunity/api/headers.py
from typing import Dict

from ..telemetry.profiles import Profile

BASE_HEADERS = {
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
    'Cache-Control': 's-maxage=5, stale-while-revalidate=10',
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Strict-Transport-Security': 'max-age=31536000',
}

EXTENDED_SECURITY_HEADERS = {
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
}


def build_response_headers(profile: Profile) -> Dict[str, str]:
    """Fixed header set applied to every response of the given profile"""
    headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Methods': ', '.join(profile.allowed_methods + ('OPTIONS',)),
        **BASE_HEADERS,
    }
    if profile.extended_security_headers:
        headers.update(EXTENDED_SECURITY_HEADERS)
    return headers
