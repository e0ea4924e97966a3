"""Rendering module for presentation concerns.

This module turns entities into response bodies:
- Basic projection (scalar fields only)
- Full projection (scalars plus the requested relation graph)
- Paginated list envelopes

This keeps serialization out of services and repositories.
"""

from rendering.projection import Views, project, project_many, project_page

__all__ = [
    "Views",
    "project",
    "project_many",
    "project_page",
]
