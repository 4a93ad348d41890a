"""Scriptorium: search indexing and query engine for a library of works."""
