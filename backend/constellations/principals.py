"""Authenticated principals and the bundled identity provider.

Token signatures are checked upstream; this service only maps an opaque bearer
token to the principal it was issued for.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    sub: str
    roles: frozenset[str] = field(default_factory=frozenset)


def has_role(principal: Principal | None, role: str) -> bool:
    return principal is not None and role in principal.roles


class StaticIdentityProvider:
    """Token table lookup: ``{"<token>": {"sub": "...", "roles": [...]}}``."""

    def __init__(self, tokens: dict[str, Principal] | None = None) -> None:
        self._tokens = dict(tokens or {})

    @classmethod
    def from_file(cls, path: Path) -> StaticIdentityProvider:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        tokens = {
            token: Principal(sub=entry["sub"], roles=frozenset(entry.get("roles", [])))
            for token, entry in data.items()
        }
        logger.info("Loaded %d identity tokens from %s", len(tokens), path)
        return cls(tokens)

    def add(self, token: str, principal: Principal) -> None:
        self._tokens[token] = principal

    def resolve(self, token: str) -> Principal | None:
        return self._tokens.get(token)
