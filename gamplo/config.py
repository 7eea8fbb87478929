"""Configuration management."""

import os
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

import yaml

from gamplo.models import GamploConfig

TOKEN_PARAM = "gamplo_token"
TOKEN_ENV_VAR = "GAMPLO_TOKEN"


def load_config(config_path: Optional[Path] = None) -> GamploConfig:
    """Load configuration from YAML file."""
    if config_path is None:
        config_path = Path("gamplo.yaml")

    if not config_path.exists():
        # Return default config
        return GamploConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return GamploConfig(**(data or {}))


def parse_args(argv: Sequence[str]) -> dict[str, str]:
    """Collect ``--key value``, ``--flag`` and ``key=value`` arguments.

    A ``--key`` followed by another ``--option`` (or by nothing) is a flag
    and maps to ``"true"``.
    """
    params: dict[str, str] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if not arg:
            i += 1
            continue

        if arg.startswith("--"):
            key = arg[2:]
            next_arg = argv[i + 1] if i + 1 < len(argv) else None
            if next_arg and not next_arg.startswith("--"):
                params[key] = next_arg
                i += 1
            else:
                params[key] = "true"
        elif "=" in arg:
            key, value = arg.split("=", 1)
            if key:
                params[key] = value
        i += 1

    return params


def get_gamplo_token(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Find a Gamplo token in command-line arguments, then the environment.

    Returns:
        The token if available, None otherwise
    """
    if argv is None:
        argv = sys.argv[1:]
    if environ is None:
        environ = os.environ

    token = parse_args(argv).get(TOKEN_PARAM)
    if token:
        return token

    return environ.get(TOKEN_ENV_VAR) or None
