"""
Remote data service bindings.
"""

from .base import RemoteDataGateway
from .rest_gateway import RestGateway
from .database_gateway import DatabaseGateway
from .factory import build_gateway

__all__ = [
    "RemoteDataGateway",
    "RestGateway",
    "DatabaseGateway",
    "build_gateway",
]
