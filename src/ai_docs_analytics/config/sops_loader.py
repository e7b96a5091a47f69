"""
SOPS-encrypted configuration loader.

Supports loading secrets (Cloudflare credentials, API secret) from
SOPS-encrypted YAML files.
"""

import logging
import subprocess
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def decrypt_sops_file(file_path: Path) -> dict[str, Any]:
    """
    Decrypt a SOPS-encrypted file and return parsed YAML.

    Args:
        file_path: Path to the encrypted file

    Returns:
        Decrypted configuration as dictionary

    Raises:
        FileNotFoundError: If file doesn't exist
        RuntimeError: If SOPS decryption fails
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Encrypted config file not found: {file_path}")

    try:
        result = subprocess.run(
            ["sops", "-d", str(file_path)],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"SOPS decryption failed: {e.stderr}") from e
    except FileNotFoundError:
        raise RuntimeError(
            "SOPS not installed. Install with: brew install sops (macOS) "
            "or download from https://github.com/getsops/sops/releases"
        )

    return parse_config_yaml(result.stdout)


def parse_config_yaml(text: str) -> dict[str, Any]:
    """
    Parse decrypted YAML configuration text.

    Raises:
        RuntimeError: If the document is not a mapping
    """
    config = yaml.safe_load(text) or {}
    if not isinstance(config, dict):
        raise RuntimeError(
            f"Configuration must be a YAML mapping, got {type(config).__name__}"
        )
    return config

