"""Client registry app package."""
