"""
Hotel results engine.

Responsibilities:
- Validate remote hotel, price and room records into one schema.
- Join hotels with their prices for a search.
- Filter, sort and paginate the joined results.
"""
