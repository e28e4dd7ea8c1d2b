"""Path and text helpers shared by the table and the CLI."""
