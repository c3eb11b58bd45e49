"""Core contracts.

Protocols implemented by concrete adapters, so the core depends on
abstractions and resolvers stay interchangeable and easy to stub in tests.
"""
