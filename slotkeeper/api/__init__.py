"""HTTP API support: dependency providers for the route layer."""
