"""
Test suite for the course checkout backend.

Test categories:
- Unit tests: pure helpers and collaborator clients with mocked transports
- Integration tests: services against an in-memory SQLite session
- API tests: the FastAPI app through httpx's ASGI transport
"""
