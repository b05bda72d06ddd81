"""
Contractor Engine Package.

FastAPI service layer for contractor matching and adaptive outcome learning.
Scores and ranks service providers against event requirements, and keeps
running service-pattern statistics updated from post-event outcome reports.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, dependencies and exceptions
    - models: Pydantic schemas and enums
    - services: Matching, learning and analytics services
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
