"""
Controllers
All routes organized by layer
"""
from app.controllers import queries_controller

__all__ = [
    "queries_controller",
]
