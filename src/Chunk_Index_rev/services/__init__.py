"""Service layer for the chunk index."""
