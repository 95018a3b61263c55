from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .params import DEFAULT_MAX_LENGTH, to_float, to_int

DEFAULT_EXPLORER_URL = "https://sepolia.basescan.org"
DEFAULT_NETWORK = "base-sepolia"
DEFAULT_JOB_TTL_SECONDS = 6 * 60 * 60
DEFAULT_APPROVAL_WINDOW_SECONDS = 1.0
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class AppConfig:
    explorer_url: str = DEFAULT_EXPLORER_URL
    network: str = DEFAULT_NETWORK
    max_length: int = DEFAULT_MAX_LENGTH
    submit_delay_seconds: float = 0.0
    approval_window_seconds: float = DEFAULT_APPROVAL_WINDOW_SECONDS
    job_ttl_seconds: float = DEFAULT_JOB_TTL_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if environ is None else environ

        def read(name: str, default: object) -> object:
            value = env.get(name, "")
            if isinstance(value, str) and not value.strip():
                return default
            return value

        log_level = str(read("SEQCOMPARE_LOG_LEVEL", "INFO")).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"SEQCOMPARE_LOG_LEVEL '{log_level}' is not a logging level")

        return cls(
            explorer_url=str(read("SEQCOMPARE_EXPLORER_URL", DEFAULT_EXPLORER_URL)).strip().rstrip("/"),
            network=str(read("SEQCOMPARE_NETWORK", DEFAULT_NETWORK)).strip(),
            max_length=to_int(read("SEQCOMPARE_MAX_LENGTH", DEFAULT_MAX_LENGTH), positive=True, name="SEQCOMPARE_MAX_LENGTH"),
            submit_delay_seconds=to_float(read("SEQCOMPARE_SUBMIT_DELAY", 0.0), min_value=0.0, name="SEQCOMPARE_SUBMIT_DELAY"),
            approval_window_seconds=to_float(
                read("SEQCOMPARE_APPROVAL_WINDOW", DEFAULT_APPROVAL_WINDOW_SECONDS),
                min_value=0.0,
                name="SEQCOMPARE_APPROVAL_WINDOW",
            ),
            job_ttl_seconds=to_float(read("SEQCOMPARE_JOB_TTL", DEFAULT_JOB_TTL_SECONDS), positive=True, name="SEQCOMPARE_JOB_TTL"),
            log_level=log_level,
        )


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once; later calls only adjust the level."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root.setLevel(level)
