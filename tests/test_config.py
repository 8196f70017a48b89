import pytest

from portsweep.config import ScanConfig


def test_defaults():
    config = ScanConfig()
    assert (config.concurrency, config.retries, config.timeout_ms, config.delay_ms) == (100, 5, 500, 100)
    assert config.report_interval == 5.0
    assert config.queue_size == 1000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"concurrency": 0},
        {"retries": -1},
        {"timeout_ms": 0},
        {"delay_ms": -5},
        {"report_interval": 0},
        {"queue_factor": 0},
    ],
)
def test_rejects_out_of_range(kwargs):
    with pytest.raises(ValueError):
        ScanConfig(**kwargs)
