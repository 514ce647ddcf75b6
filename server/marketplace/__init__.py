"""Tour marketplace API."""
