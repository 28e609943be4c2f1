"""Build and run Terraform CLI subcommands with a controlled environment."""

__version__ = "0.18.1"