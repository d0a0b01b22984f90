"""Extraction services: content acquisition, text and visual extraction."""
