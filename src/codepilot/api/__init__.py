# API package
# Contains API endpoints and request/response models

from . import query

__all__ = ["query"]
