# Flask blueprints for the surveyport web interface
from .imports import imports_bp

__all__ = ["imports_bp"]
