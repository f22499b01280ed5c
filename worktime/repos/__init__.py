"""Repositories for the working-time scheduling domain."""
