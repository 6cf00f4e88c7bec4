"""
Services

Service classes shared by the CLI and the core.
"""

from codecollab.services.config_service import ConfigService

__all__ = ["ConfigService"]
