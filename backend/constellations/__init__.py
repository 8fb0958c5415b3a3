"""Constellations scene service: lifecycle, authorization and interactions for sky scenes."""
