"""In-memory storage pages and a unique-key B+ tree index for a small database engine."""

__version__ = "0.1.0"