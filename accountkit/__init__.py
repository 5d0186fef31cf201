"""Account lifecycle management service."""
