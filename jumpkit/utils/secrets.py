import os
import re

import click


def secret_env_var(item: str) -> str:
    """e.g. "staging RDS Password" -> "STAGING_RDS_PASSWORD" """
    return re.sub(r"[^A-Z0-9]+", "_", item.upper()).strip("_")


def lookup_secret(item: str) -> str:
    value = os.environ.get(secret_env_var(item))
    if value:
        return value
    return click.prompt(
        f"Enter {item}",
        hide_input=item.lower().endswith("password"),
        err=True,
    )
