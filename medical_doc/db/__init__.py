"""Persistence layer: models, schemas, record store and repositories."""
