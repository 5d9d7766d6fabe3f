"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks that every feature uses (DB wiring,
settings, logging, the error envelope, rate limiting). Keep feature-specific
SQL and business logic in the corresponding feature package (e.g. `projects/`).
"""
