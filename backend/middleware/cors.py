from flask_cors import CORS
from flask import request
import logging

logger = logging.getLogger(__name__)

ALLOWED_HEADERS = [
    "Accept",
    "Authorization",
    "Cache-Control",
    "Content-Type",
    "Origin",
    "X-Requested-With",
]


def setup_cors(app):
    """
    CORS for the web client and the mobile shell. Session cookies are sent
    cross-origin, so credentials are enabled and origins must be listed.
    """
    allowed_origins = app.config.get('CORS_ORIGINS') or []

    CORS(app,
         origins=allowed_origins,
         allow_headers=ALLOWED_HEADERS,
         expose_headers=["Content-Disposition"],
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         max_age=86400,
         vary_header=True
    )

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # API responses are never cached; /pdf and /uploads set their own headers
        if request.path.startswith('/api/'):
            response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
            response.headers['Pragma'] = 'no-cache'
            response.headers['Expires'] = '0'

        return response

    logger.info(f"CORS configured for origins: {', '.join(allowed_origins)}")
