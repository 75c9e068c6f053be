"""Chunk index revision - hybrid vector point management over Qdrant.

Key Responsibilities:
    - Provide the root package for the Chunk_Index_rev modules
    - Expose the package version for diagnostics

Collaborators:
    - Upstream: Ingestion and search request handlers import from subpackages
    - Downstream: ``Chunk_Index_rev.services.vector_store`` and configuration helpers

Example:
    >>> from Chunk_Index_rev import __version__
    >>> __version__
    '0.1.0'
"""

__version__ = "0.1.0"
