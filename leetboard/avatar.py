"""Avatar provider drawing random characters from a public character API."""

from __future__ import annotations

import json
import random
import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any

from .ports import AvatarProvider

CHARACTER_API = "https://rickandmortyapi.com/api/character"
DEFAULT_TIMEOUT = 10.0


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """GET ``url`` and decode its body as JSON, whatever the status code."""
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as err:
        try:
            body = err.read()
        finally:
            err.close()
    return json.loads(body)


class RickAndMortyClient(AvatarProvider):
    """Picks a random character and returns its name and image URL."""

    def __init__(
        self,
        fetch: Callable[[str], Any] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._fetch = fetch if fetch is not None else fetch_json
        self._rng = rng if rng is not None else random.Random()
        self._total = 0

    def next(self) -> tuple[str, str]:
        if not self._total:
            meta = self._fetch(CHARACTER_API)
            self._total = int((meta.get("info") or {}).get("count", 0))
        if self._total <= 0:
            raise ValueError("character API reported no characters")
        character_id = self._rng.randint(1, self._total)
        character = self._fetch(f"{CHARACTER_API}/{character_id}")
        return character.get("name", ""), character.get("image", "")