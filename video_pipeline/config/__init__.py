"""Prompt configuration for the Video Pipeline Service."""
