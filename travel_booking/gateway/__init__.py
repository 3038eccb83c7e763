"""
Hotel pricing API gateway.

Responsibilities:
- Manage the remote API base URL, timeout and default search parameters.
- Forward hotel, price and room queries to the remote API.
- Validate remote payloads into the hotel schema.
- Surface remote failures as ``GatewayError``.
"""
