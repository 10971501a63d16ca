"""Send audit storage adapters.

The recipient throttle reads recent successful sends from here. Only an
in-memory store exists; a database-backed one can implement the same base.
"""
