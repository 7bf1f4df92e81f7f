"""Core hashing, key and data model primitives."""
