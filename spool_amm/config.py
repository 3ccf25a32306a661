"""
AMM runtime configuration.

Configuration is a small YAML mapping, validated fail-closed:

    fee:
      numerator: 30
      denominator: 1000
    minimum_liquidity: 1000
    invariant_policy: MONOTONIC
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from .core.amm import AmmConfig
from .core.cpmm import InvariantPolicy
from .core.fees import DEFAULT_FEE_RATE, FeeRate
from .core.liquidity import MINIMUM_LIQUIDITY
from .errors import ConfigError

_KNOWN_KEYS = frozenset({"fee", "minimum_liquidity", "invariant_policy"})


def _require_mapping(obj: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{name} must be an object")
    return obj


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an int")
    return obj


def _parse_policy(obj: Any) -> InvariantPolicy:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError("invariant_policy must be a non-empty string")
    try:
        return InvariantPolicy(obj.strip().upper())
    except ValueError as exc:
        raise ConfigError(f"unsupported invariant_policy: {obj!r}") from exc


def config_from_mapping(raw: Mapping[str, Any]) -> AmmConfig:
    root = _require_mapping(raw, name="config")
    unknown = sorted(set(root) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")

    fee_rate = DEFAULT_FEE_RATE
    if root.get("fee") is not None:
        fee = _require_mapping(root["fee"], name="fee")
        numerator = _require_int(fee.get("numerator"), name="fee.numerator")
        denominator = _require_int(fee.get("denominator"), name="fee.denominator")
        try:
            fee_rate = FeeRate(numerator=numerator, denominator=denominator)
        except ValueError as exc:
            raise ConfigError(f"invalid fee: {exc}") from exc

    minimum_liquidity = MINIMUM_LIQUIDITY
    if root.get("minimum_liquidity") is not None:
        minimum_liquidity = _require_int(root["minimum_liquidity"], name="minimum_liquidity")
        if minimum_liquidity < 0:
            raise ConfigError("minimum_liquidity must be non-negative")

    policy = InvariantPolicy.MONOTONIC
    if root.get("invariant_policy") is not None:
        policy = _parse_policy(root["invariant_policy"])

    return AmmConfig(fee_rate=fee_rate, minimum_liquidity=minimum_liquidity, invariant_policy=policy)


def load_config(path: Path) -> AmmConfig:
    """Load and validate an AMM config from a YAML file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    try:
        obj = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if obj is None:
        return AmmConfig()
    return config_from_mapping(obj)
