"""Engine configuration.

The ANS engine and the occupancy model are parameterized by a handful of
precision constants. They are bundled in an immutable ``EngineConfig`` that
is passed to every engine and model, so several configurations (for example
a narrow one for tests and the default one) can coexist in one process.

Configuration can also be read from a TOML file with an ``[engine]`` table:

    [engine]
    word_bits = 32
    state_bits = 64
    precision_bits = 24
    skip_forced_slots = true

Example:
    >>> config = EngineConfig(word_bits=16, state_bits=32, precision_bits=16)
    >>> config.state_lower, config.total
    (65536, 65536)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Literal, cast

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CNK_CONFIG"
CONFIG_FILENAME = "cnk.toml"


class EngineConfig(BaseModel):
    """Fixed precision constants of the rANS engine.

    Attributes:
        word_bits: Width of each renormalization word
        state_bits: Width of the coder state; must be ``2 * word_bits``
        precision_bits: Probabilities are quantized to ``2**precision_bits``
        skip_forced_slots: Jump over zero-cost slots instead of walking them
    """

    model_config = {"frozen": True}

    word_bits: Literal[8, 16, 32] = 32
    state_bits: int = Field(default=64, gt=0)
    precision_bits: int = Field(default=24, ge=1, le=32)
    skip_forced_slots: bool = True

    @model_validator(mode="after")
    def _check_widths(self) -> EngineConfig:
        if self.state_bits != 2 * self.word_bits:
            raise ValueError(
                f"state_bits must be twice word_bits, got "
                f"state_bits={self.state_bits}, word_bits={self.word_bits}"
            )
        if self.precision_bits > self.state_bits - self.word_bits:
            raise ValueError(
                f"precision_bits must be <= {self.state_bits - self.word_bits}, "
                f"got {self.precision_bits}"
            )
        return self

    @property
    def state_lower(self) -> int:
        """Inclusive lower bound L of the normalized state interval."""
        return 1 << (self.state_bits - self.word_bits)

    @property
    def state_upper(self) -> int:
        """Exclusive upper bound H of the normalized state interval."""
        return 1 << self.state_bits

    @property
    def total(self) -> int:
        """Quantized probability denominator."""
        return 1 << self.precision_bits

    @property
    def word_mask(self) -> int:
        return (1 << self.word_bits) - 1

    @property
    def word_bytes(self) -> int:
        return self.word_bits // 8

    @property
    def state_words(self) -> int:
        """Number of words used to flush the final state."""
        return self.state_bits // self.word_bits


DEFAULT_CONFIG = EngineConfig()


def _resolve_config_path(config_path: str | None) -> str | None:
    """Resolve configuration path from env, explicit path, or defaults."""
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        return env_config
    if config_path:
        return config_path
    # Look for cnk.toml in current directory or home
    candidates = [
        CONFIG_FILENAME,
        os.path.expanduser(f"~/{CONFIG_FILENAME}"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    return None


def load_engine_config(config_path: str | None = None) -> EngineConfig:
    """Load engine constants from TOML, falling back to the defaults.

    Args:
        config_path: Path to cnk.toml (auto-detected if None)

    Returns:
        EngineConfig built from the ``[engine]`` table

    Raises:
        FileNotFoundError: If a configured path does not exist
        ValueError: If the file holds invalid engine constants
    """
    resolved_path = _resolve_config_path(config_path)
    if resolved_path is None:
        return DEFAULT_CONFIG
    if not os.path.exists(resolved_path):
        raise FileNotFoundError(
            f"Config file not found at {resolved_path}. "
            f"Set {CONFIG_ENV_VAR} or create {CONFIG_FILENAME}"
        )
    with open(resolved_path, "rb") as f:
        config = cast(dict[str, Any], tomllib.load(f))
    engine_cfg = config.get("engine", {})
    if not isinstance(engine_cfg, dict):
        raise ValueError(f"[engine] in {resolved_path} must be a table")
    logger.debug("Loaded engine config from %s: %s", resolved_path, engine_cfg)
    return EngineConfig(**engine_cfg)


@lru_cache(maxsize=1)
def get_process_config() -> EngineConfig:
    """Auto-detected engine constants, resolved once per process.

    Buffers carry no engine constants, so the config used when none is
    given must not drift with later changes to ``CNK_CONFIG`` or the
    working directory. Pass a config or config path explicitly to override.
    """
    config = load_engine_config()
    logger.debug("Process engine config: %s", config)
    return config
