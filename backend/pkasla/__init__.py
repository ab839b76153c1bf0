# backend/pkasla/__init__.py
"""PKASLA wedding-invitation and job board backend."""

__version__ = "1.0.0"
