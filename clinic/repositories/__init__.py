"""Repositories: translate domain operations into Django ORM calls."""
