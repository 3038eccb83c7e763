"""Hotel search and booking service."""
