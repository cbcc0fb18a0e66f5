"""Query context providers for paging readers.

Each provider module supplies a query context, a factory for it, and a way
to build query executors against it.

Available providers (require optional dependencies, import the module directly):
- postgres: PostgreSQL via asyncpg, also usable as a chunk writer
- sqlalchemy: SQLAlchemy ORM `AsyncSession`, with identity-map clear/detach
"""
