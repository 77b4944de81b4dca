"""
Application Entities

Exports:
    - Application: Job application with status lifecycle
"""

from .application import Application

__all__ = ["Application"]
