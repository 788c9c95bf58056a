"""Clients for the remote document index service."""
