"""Inkwell API.

GitHub sign-in, cookie sessions, CSRF protection and owner-scoped access to
installations, repositories and proposals.
"""

import logging

# Quiet chatty third-party loggers before anything else imports them
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

__version__ = "0.1.0"
__all__ = ["__version__"]
