"""CLI interface for pocketledger."""
