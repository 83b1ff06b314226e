"""Core infrastructure for the fixture reconciler.

Configuration, logging, the async database manager and the FastAPI session
dependency used by the importer, the validator and the report API.
"""
