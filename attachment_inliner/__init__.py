"""
Attachment inliner.

Rewrites remote attachment references in FHIR DocumentReference resources,
either inlining the fetched bytes or persisting them to local storage.
"""

__version__ = "0.1.0"
