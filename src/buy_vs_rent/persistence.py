"""Save and restore the two input structs so a session can be resumed.

Only the string inputs are stored; projections are always recomputed.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union

from .schemas import BuyInputs, ProjectionRequest, RentInputs

logger = logging.getLogger(__name__)

STATE_ENV_VAR = "BUY_VS_RENT_STATE"
STORAGE_KEYS = {"buy": "buy_inputs", "rent": "rent_inputs"}

T = TypeVar("T", BuyInputs, RentInputs)


class PersistenceError(RuntimeError):
    """Saved inputs could not be read back."""


def default_state_path() -> Path:
    override = os.environ.get(STATE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".buy_vs_rent" / "inputs.json"


def dump_request(request: ProjectionRequest) -> Dict[str, Any]:
    return {
        STORAGE_KEYS["buy"]: asdict(request.buy_inputs),
        STORAGE_KEYS["rent"]: asdict(request.rent_inputs),
    }


def _inputs_from_dict(cls: Type[T], data: Any, key: str) -> T:
    if not isinstance(data, dict):
        raise PersistenceError(f"'{key}' must be an object")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown %s fields: %s", key, ", ".join(unknown))
    return cls(
        **{
            name: "" if value is None else str(value)
            for name, value in data.items()
            if name in known
        }
    )


def load_request_dict(payload: Any) -> ProjectionRequest:
    if not isinstance(payload, dict):
        raise PersistenceError("saved inputs must be a JSON object")
    buy_key, rent_key = STORAGE_KEYS["buy"], STORAGE_KEYS["rent"]
    return ProjectionRequest(
        buy_inputs=_inputs_from_dict(BuyInputs, payload.get(buy_key, {}), buy_key),
        rent_inputs=_inputs_from_dict(RentInputs, payload.get(rent_key, {}), rent_key),
    )


def save_request(
    request: ProjectionRequest, path: Optional[Union[str, Path]] = None
) -> Path:
    target = Path(path) if path is not None else default_state_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(dump_request(request), indent=2), encoding="utf-8")
    logger.debug("Saved inputs to %s", target)
    return target


def load_request(path: Optional[Union[str, Path]] = None) -> Optional[ProjectionRequest]:
    """Return the saved inputs, or ``None`` when nothing has been saved yet."""
    source = Path(path) if path is not None else default_state_path()
    if not source.exists():
        return None
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"could not read saved inputs from {source}: {exc}") from exc
    return load_request_dict(payload)
