"""
Application Services Layer

Orchestrates domain services and coordinates use cases.
"""

from .admin_service import AdminReportService
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .share_service import IncomingFile, ShareService

__all__ = [
    'AdminReportService',
    'DependencyContainer',
    'DependencyNotFoundError',
    'IncomingFile',
    'ShareService',
]
