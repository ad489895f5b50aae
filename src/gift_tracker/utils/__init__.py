"""Utilities package for gift-tracker application."""
