"""Core sync logic for fleetsync, independent of the CLI."""
