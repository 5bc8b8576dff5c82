"""
access_review_config -- single public entrypoint for review configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a validated ``ReviewConfig``; kernel
    inputs are built from it by ``access_review_config.bridges``.

Architecture position:
    Configuration -- YAML-driven.  This package sits above
    ``access_review_kernel``.  The kernel MUST NEVER import from
    ``access_review_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Validation: the configuration must pass ``validate_configuration``
      before it is returned.
    - Deterministic identity: the same YAML always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- validation failed; the message lists every error.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``ACCESS_REVIEW_CONFIG_TRACE`` log entry with the config_id, version,
    checksum, store backend and reviewer binding counts, tying each review
    decision to the configuration that authorized it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from access_review_config.loader import load_config
from access_review_config.schema import ReviewConfig
from access_review_config.validator import validate_configuration

_logger = logging.getLogger("access_review_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> ReviewConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load.  Defaults to
            ``access_review_config/sets/default.yaml``.

    Returns:
        A validated, frozen ``ReviewConfig``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_config(path)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_warning", extra={"warning": warning})

    _logger.info(
        "ACCESS_REVIEW_CONFIG_TRACE",
        extra={
            "trace_type": "ACCESS_REVIEW_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "store_backend": config.store.backend,
            "validator_count": len(config.reviewers.validator_usernames),
            "recommender_count": len(config.reviewers.recommender_usernames),
            "approver_role_count": len(config.reviewers.approver_roles),
        },
    )

    return config


__all__ = ["DEFAULT_CONFIG_PATH", "ReviewConfig", "get_active_config"]
