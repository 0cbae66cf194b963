from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from fakes import SITE, FakeConnector, wrapper_http_client
from zeroframe import ZeroFrame


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def make_zeroframe(connector):
    def _make(options: Optional[Dict[str, Any]] = None, hooks=None, **kwargs: Any) -> ZeroFrame:
        merged: Dict[str, Any] = {"reconnect": {"delay": 0}}
        for section, values in (options or {}).items():
            merged.setdefault(section, {}).update(values)
        return ZeroFrame(
            SITE,
            merged,
            hooks,
            http_client=kwargs.pop("http_client", None) or wrapper_http_client(),
            connector=kwargs.pop("connector", None) or connector,
        )

    return _make
