"""Click subcommands of the reqbump CLI."""
