"""CLI subcommands for buildkeeper."""
