"""Upload settings and YAML config loading"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional
import logging

import yaml

from .errors import InputError
from .transport.base import ArgumentMode
from .upload.models import DEFAULT_CONCURRENT_UPLOADS, MAX_CANISTER_HTTP_PAYLOAD_SIZE

logger = logging.getLogger(__name__)


@dataclass
class UploadSettings:
    """Defaults for an upload run, overridable from the command line"""
    chunk_size: int = MAX_CANISTER_HTTP_PAYLOAD_SIZE
    concurrent_uploads: int = DEFAULT_CONCURRENT_UPLOADS
    network: Optional[str] = None
    argument_mode: ArgumentMode = ArgumentMode.FILE
    include_index: Optional[bool] = None
    dfx_binary: str = "dfx"

    def override(self, **values) -> "UploadSettings":
        """Return a copy with every non-None value applied"""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


def load_settings(path: Optional[Path] = None) -> UploadSettings:
    """
    Load settings from a YAML file
    Missing path means defaults; unknown keys are rejected
    """
    if path is None:
        return UploadSettings()

    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise InputError(f"Cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise InputError(f"Invalid YAML in {path}: {e}")

    if not isinstance(raw, dict):
        raise InputError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(UploadSettings)}
    unknown = set(raw) - known
    if unknown:
        raise InputError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")

    if 'argument_mode' in raw:
        try:
            raw['argument_mode'] = ArgumentMode(raw['argument_mode'])
        except ValueError:
            raise InputError(f"Invalid argument_mode: {raw['argument_mode']!r}")

    for key in ('chunk_size', 'concurrent_uploads'):
        if key in raw and (not isinstance(raw[key], int) or isinstance(raw[key], bool)):
            raise InputError(f"{key} must be an integer, got {raw[key]!r}")

    for key in ('network', 'dfx_binary'):
        if raw.get(key) is not None and not isinstance(raw[key], str):
            raise InputError(f"{key} must be a string, got {raw[key]!r}")

    if raw.get('include_index') is not None and not isinstance(raw['include_index'], bool):
        raise InputError(f"include_index must be true or false, got {raw['include_index']!r}")

    logger.debug(f"Loaded settings from {path}")
    return UploadSettings(**raw)
