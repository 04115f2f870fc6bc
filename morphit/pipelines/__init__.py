"""Multi-stage conversions: two-pass video, GIF palette, PDF pages, archives."""
