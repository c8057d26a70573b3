import pytest

import fetcher


@pytest.fixture()
def no_backoff(monkeypatch):
    monkeypatch.setattr(fetcher, "HTTP_BACKOFF_SECONDS", 0)
