"""Service layer for business logic.

Services encapsulate business rules, keeping routes thin and focused on HTTP
handling.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

Services should:
- Contain all business rules and validation (uniqueness, delete guards)
- Orchestrate calls to repositories
- Raise core.errors exceptions, never HTTP exceptions

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""
