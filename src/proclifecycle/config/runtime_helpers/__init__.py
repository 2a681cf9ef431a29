"""Helpers behind the environment-backed configuration accessors."""

from .dotenv_loader import DotenvLoader, parse_dotenv_line

__all__ = ["DotenvLoader", "parse_dotenv_line"]
