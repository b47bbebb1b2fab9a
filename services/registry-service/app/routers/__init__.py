"""
API routers for the Blood Bank Registry Service.
"""

from . import health, records

__all__ = ["health", "records"]
