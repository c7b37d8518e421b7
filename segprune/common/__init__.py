"""Shared configuration for the segprune package."""
