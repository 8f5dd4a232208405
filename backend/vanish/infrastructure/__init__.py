"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure implements core Protocols; it never decides domain outcomes
    - All external calls wrapped with timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients (single responsibility)
"""
