"""
ragqa: question/answer knowledge base with semantic search over PostgreSQL + pgvector.
"""
__version__ = "1.0.0"
