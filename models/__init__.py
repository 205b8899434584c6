"""Pydantic models for the listing upload draft."""

from .listing import DraftSnapshot, ListingFormData, default_form_data

__all__ = ["DraftSnapshot", "ListingFormData", "default_form_data"]
