"""
Destination catalog and typo-tolerant destination search.

Responsibilities:
- Load the static destination list once per process.
- Match free-text queries against destination names and states.
"""
