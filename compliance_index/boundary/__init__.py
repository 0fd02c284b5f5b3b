"""Boundary adapters: database, blob storage and identity provider."""
