"""Mock booking confirmations kept in process memory."""
