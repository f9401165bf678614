"""Fingerprint services queried during an audit."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable

CURSE_FINGERPRINT_URL = "https://addons-ecs.forgesvc.net/api/v2/fingerprint"
WOWUP_FINGERPRINT_URL = "https://hub.wowup.io/curseforge/addons/fingerprint"


class ServiceChoice(str, Enum):
    """The two fingerprint APIs; CURSE is primary, WOWUP secondary."""

    CURSE = "curse"
    WOWUP = "wowup"

    @property
    def label(self) -> str:
        return f"{self.value}_api"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def default_url(self) -> str:
        return _DEFAULT_URLS[self]

    def request_payload(self, fingerprints: Iterable[int]) -> Any:
        """Shape a batch the way this service expects it.

        Curse takes a bare array while WowUp wraps the same array in an object.
        """

        values = [int(fp) for fp in fingerprints]
        if self is ServiceChoice.CURSE:
            return values
        return {"fingerprints": values}

    def encode_body(self, fingerprints: Iterable[int]) -> bytes:
        return json.dumps(self.request_payload(fingerprints)).encode("utf-8")

    def __str__(self) -> str:
        return self.label


_DISPLAY_NAMES = {
    ServiceChoice.CURSE: "Curse",
    ServiceChoice.WOWUP: "WowUp",
}

_DEFAULT_URLS = {
    ServiceChoice.CURSE: CURSE_FINGERPRINT_URL,
    ServiceChoice.WOWUP: WOWUP_FINGERPRINT_URL,
}

ALL_SERVICES: tuple[ServiceChoice, ...] = (ServiceChoice.CURSE, ServiceChoice.WOWUP)


__all__ = [
    "ALL_SERVICES",
    "CURSE_FINGERPRINT_URL",
    "ServiceChoice",
    "WOWUP_FINGERPRINT_URL",
]
