"""Saved targets, stored in the same YAML file the ``fly`` CLI uses."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import CredentialStoreError, TargetNotFoundError
from .models.targets import Credential, Target, TargetToken

logger = logging.getLogger(__name__)


def default_path() -> Path:
    """Return the credential file location (``$FLYRC`` or ``~/.flyrc``)."""
    override = os.getenv("FLYRC")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".flyrc"


class CredentialStore:
    """Persist and reload bearer tokens keyed by target name.

    Entries and top-level keys this module does not understand are kept
    as-is on rewrite, so the file stays usable by other tools.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_path()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise CredentialStoreError(f"Failed to read {self.path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CredentialStoreError(f"{self.path} is not a mapping")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        temp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(temp_path, self.path)
        except OSError as e:
            try:
                if temp_path.exists():
                    temp_path.unlink()
            except OSError:
                logger.warning("Failed to clean up temp file: %s", temp_path)
            raise CredentialStoreError(f"Failed to save {self.path}: {e}") from e

    def _targets(self) -> dict[str, Any]:
        targets = self._read().get("targets") or {}
        if not isinstance(targets, dict):
            raise CredentialStoreError(f"'targets' in {self.path} is not a mapping")
        return targets

    def names(self) -> list[str]:
        return sorted(str(name) for name in self._targets())

    def save(
        self,
        name: str,
        base_url: str,
        team: str,
        token_type: str,
        token_value: str,
        insecure: bool = False,
    ) -> None:
        """Create or overwrite the entry for *name*."""
        data = self._read()
        targets = data.get("targets")
        if not isinstance(targets, dict):
            targets = {}

        existing = targets.get(name)
        entry: dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
        entry.update(
            Credential(
                api=base_url.rstrip("/"),
                team=team,
                insecure=insecure,
                token=TargetToken(type=token_type, value=token_value),
            ).to_dict()
        )
        targets[name] = entry
        data["targets"] = targets

        self._write(data)
        logger.info("Saved target %s (%s, team %s) to %s", name, base_url, team, self.path)

    def load(self, name: str) -> Target:
        targets = self._targets()
        raw = targets.get(name)
        if raw is None:
            raise TargetNotFoundError(name, self.names())
        try:
            credential = Credential.model_validate(raw)
        except ValidationError as e:
            raise CredentialStoreError(f"Target '{name}' in {self.path} is invalid: {e}") from e
        if credential.token is None or not credential.token.value:
            raise TargetNotFoundError(name, self.names())

        logger.debug("Loaded target %s from %s", name, self.path)
        return Target(
            base_url=credential.api.rstrip("/"),
            team=credential.team,
            token_type=credential.token.type,
            token_value=credential.token.value,
            insecure=credential.insecure,
            name=name,
        )
