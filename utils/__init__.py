"""Utility helpers for the upload wizard."""
