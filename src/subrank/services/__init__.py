"""Fetching, storage, and reporting services for subrank."""
