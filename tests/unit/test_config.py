"""
Unit tests untuk Config.
"""

import pytest
from clusterutils.utils.config import Config


def test_get_workers_parses_table(monkeypatch):
    monkeypatch.setenv('WORKERS', '1=localhost:5001, 2=10.0.0.2:5002,')

    assert Config.get_workers() == {1: 'localhost:5001', 2: '10.0.0.2:5002'}


def test_get_workers_empty(monkeypatch):
    monkeypatch.delenv('WORKERS', raising=False)

    assert Config.get_workers() == {}


def test_get_workers_rejects_missing_address(monkeypatch):
    monkeypatch.setenv('WORKERS', '1=localhost:5001,2')

    with pytest.raises(ValueError):
        Config.get_workers()


def test_zero_timeout_means_no_timeout(monkeypatch):
    monkeypatch.setattr(Config, 'REMOTE_TIMEOUT', 0.0)
    assert Config.get_timeout() is None

    monkeypatch.setattr(Config, 'REMOTE_TIMEOUT', 2.5)
    assert Config.get_timeout() == 2.5


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
