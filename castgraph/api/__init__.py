"""HTTP API: routes, request/response schemas, middleware."""
