# ABOUTME: Subcommands of the bookclub CLI, one module per command.
# ABOUTME: Each module exposes a single click command registered by bookclub.cli.
