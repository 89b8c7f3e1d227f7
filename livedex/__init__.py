"""Livedex - live route and battle context for a monster-catching companion."""
