"""Command-line interface for morphit."""
