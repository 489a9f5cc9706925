"""Built-in CLI sub-commands for dualauth."""
