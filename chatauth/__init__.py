"""Credential and token issuance service for the chat platform."""

__version__ = "0.1.0"
