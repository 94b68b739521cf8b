"""
Application composition root package.

This package contains the container that wires discovery, the registry,
the completion signal and the sequencer together.
"""

from .container import ApplicationContainer, create_application_container, create_type_sources

__all__ = [
    "ApplicationContainer",
    "create_application_container",
    "create_type_sources",
]
