"""Local HTTP surface for the ALVR server settings store."""
