"""API documentation helpers built on drf-yasg."""
