"""In-memory search and booking events and their aggregates."""
