"""Pytest configuration providing fake fingerprint APIs and shared fixtures."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

import httpx
import pytest
import structlog
from structlog.testing import capture_logs

from addon_audit import logging_conf
from addon_audit.config import AuditConfig, ConfigLocator, ConfigRepository
from addon_audit.config.models import CURSE_SEARCH_URL
from addon_audit.engine import Package, fanout
from addon_audit.services import ServiceChoice


class FakeFingerprintApi:
    """In-memory stand-in for the catalog and both fingerprint endpoints.

    ``known`` maps a service to ``{fingerprint: package_id}``; a request gets
    one exact match per submitted fingerprint the service knows.
    """

    def __init__(self, packages: Iterable[dict[str, Any]] = ()) -> None:
        self.packages = list(packages)
        self.known: dict[ServiceChoice, dict[int, int]] = {
            ServiceChoice.CURSE: {},
            ServiceChoice.WOWUP: {},
        }
        self.requests: list[tuple[ServiceChoice, list[int]]] = []
        self.raw_bodies: list[tuple[ServiceChoice, Any]] = []
        self.failures: list[tuple[ServiceChoice, Callable[[list[int]], bool], str]] = []
        self.catalog_status = 200
        self.catalog_body: bytes | None = None
        self.catalog_params: dict[str, str] = {}

    def recognise(self, service: ServiceChoice, package_id: int, *fingerprints: int) -> None:
        for fp in fingerprints:
            self.known[service][fp] = package_id

    def fail(
        self,
        service: ServiceChoice,
        when: Callable[[list[int]], bool] = lambda _fps: True,
        mode: str = "transport",
    ) -> None:
        self.failures.append((service, when, mode))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if request.method == "GET" and url.startswith(CURSE_SEARCH_URL):
            self.catalog_params = dict(request.url.params)
            if self.catalog_body is not None:
                return httpx.Response(self.catalog_status, content=self.catalog_body)
            return httpx.Response(self.catalog_status, json=self.packages)
        service = self._service_for(url)
        payload = json.loads(request.content)
        self.raw_bodies.append((service, payload))
        fingerprints = payload if service is ServiceChoice.CURSE else payload["fingerprints"]
        self.requests.append((service, list(fingerprints)))
        for failing_service, when, mode in self.failures:
            if failing_service is service and when(fingerprints):
                if mode == "transport":
                    raise httpx.ConnectError("connection refused", request=request)
                if mode == "status":
                    return httpx.Response(503, text="unavailable")
                return httpx.Response(200, text="<html>not json</html>")
        matches = [
            {"id": self.known[service][fp], "file": {"id": fp}}
            for fp in fingerprints
            if fp in self.known[service]
        ]
        return httpx.Response(
            200,
            json={
                "exactMatches": matches,
                "exactFingerprints": [fp for fp in fingerprints if fp in self.known[service]],
                "unmatchedFingerprints": [
                    fp for fp in fingerprints if fp not in self.known[service]
                ],
            },
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def request_count(self, service: ServiceChoice) -> int:
        return sum(1 for svc, _ in self.requests if svc is service)

    @staticmethod
    def _service_for(url: str) -> ServiceChoice:
        for service in (ServiceChoice.CURSE, ServiceChoice.WOWUP):
            if url == service.default_url:
                return service
        raise AssertionError(f"unexpected url {url}")


def package_payload(package_id: int, *file_modules: Iterable[int], name: str | None = None) -> dict:
    """Build a catalog entry; each positional iterable is one file's fingerprints."""

    return {
        "id": package_id,
        "name": name or f"Addon {package_id}",
        "latestFiles": [
            {
                "id": package_id * 100 + index,
                "fileName": f"addon-{package_id}-{index}.zip",
                "modules": [{"foldername": f"Mod{fp}", "fingerprint": fp} for fp in modules],
            }
            for index, modules in enumerate(file_modules)
        ],
    }


@pytest.fixture(autouse=True)
def captured_logs() -> Iterable[list[dict[str, Any]]]:
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def catalog_entry() -> Callable[..., dict]:
    return package_payload


@pytest.fixture
def make_package() -> Callable[..., Package]:
    def _builder(package_id: int, *file_modules: Iterable[int]) -> Package:
        return Package.model_validate(package_payload(package_id, *file_modules))

    return _builder


@pytest.fixture
def fake_api() -> FakeFingerprintApi:
    return FakeFingerprintApi()


@pytest.fixture
def audit_config() -> Callable[..., AuditConfig]:
    def _builder(**overrides: Any) -> AuditConfig:
        return AuditConfig(**overrides)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("ADDON_AUDIT_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository


@pytest.fixture
def fresh_logging(monkeypatch: pytest.MonkeyPatch) -> Iterable[None]:
    """Allow ``configure_logging`` to run again and undo its handlers afterwards."""

    monkeypatch.setattr(logging_conf, "_LOGGING_INITIALISED", False)
    # The module-level fan-out logger caches its first binding; give the test its own.
    monkeypatch.setattr(fanout, "logger", structlog.get_logger("addon_audit.fanout"))
    yield
    app_logger = logging.getLogger(logging_conf.LOGGER_NAME)
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    structlog.reset_defaults()
