"""
Infrastructure layer - hotel inventory access.

Concrete implementations of the application ports.

Structure:
- cache/: shared cache with request coalescing, rate limiting
- db/: SQLAlchemy tables and SQL repositories
- gateways/: supplier adapters, registry and the Stripe refund gateway
- in_memory/: in-memory implementations for local runs and tests
"""
