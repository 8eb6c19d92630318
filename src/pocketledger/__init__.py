"""pocketledger - budgets, transactions and bank balances on a local SQLite store."""

__version__ = "0.1.0"


# Import main lazily so library users never pay for the CLI imports
def __getattr__(name):
    if name == "main":
        from pocketledger.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
