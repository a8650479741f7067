"""Infrastructure layer - persistence, authentication and the HTTP API."""
