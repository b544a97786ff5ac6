"""Database fixtures shared across test modules."""
