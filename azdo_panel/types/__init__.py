"""azdo-panel type definitions.

This module exports all data model types used by the panel.
"""

from azdo_panel.types.credentials import Credentials
from azdo_panel.types.projects import Project
from azdo_panel.types.repos import Repository

__all__ = [
    "Credentials",
    "Project",
    "Repository",
]
