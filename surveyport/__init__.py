"""
surveyport: bulk import and export of survey definitions.

Reads "Survey Master" / "Question Master" data from workbooks or delimited
text, consolidates multi-language question rows into canonical records,
validates them against the question-type rule table and commits accepted
batches atomically to a JSON store.
"""

__version__ = "0.3.0"
__all__ = []
