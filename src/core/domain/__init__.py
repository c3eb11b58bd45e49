"""Domain models and value logic.

Pure data structures (Pydantic v2) and version arithmetic. The domain knows
nothing about catalogs, HTTP, subprocesses or the CLI.
"""
