"""Configuration, logging and API service helpers."""
