"""Codebase RAG: index a source tree and answer questions about it."""

__version__ = "0.1.0"
