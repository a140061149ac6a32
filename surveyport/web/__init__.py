# Web interface modules for surveyport
"""
This package contains the Flask app factory, blueprints and upload staging
for the surveyport HTTP interface.
"""

from .upload import stage_upload, staged_filename

__all__ = [
    "stage_upload",
    "staged_filename",
]
