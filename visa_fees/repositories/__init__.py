"""Repositories for application storage."""
