"""Input validation for CLI arguments."""
import sys
from typing import Optional


def validate_required(flag: str, value: Optional[str], hint: str = "") -> None:
    """
    Validate that a required option was given a non-empty value.

    Args:
        flag: Option name as shown to the user, e.g. "--secrets-file"
        value: Parsed value
        hint: Extra guidance printed after the error

    Raises:
        SystemExit with code 2 if validation fails
    """
    if value is None or value.strip() == "":
        print(f"Error: {flag} is required and cannot be empty", file=sys.stderr)
        if hint:
            print(f"\n{hint}", file=sys.stderr)
        sys.exit(2)


def validate_not_blank(flag: str, value: Optional[str]) -> None:
    """
    Validate that an optional flag, if given, is not blank.

    Catches things like --project-id "" which would otherwise silently fall
    through to the next resolution source.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if value is not None and value.strip() == "":
        print(f"Error: {flag} cannot be empty", file=sys.stderr)
        sys.exit(2)
