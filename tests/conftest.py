"""
this file contains fixtures that are intended to be used across multiple test
files
"""

from datetime import date
from typing import Iterator

import pytest
from _pytest.monkeypatch import MonkeyPatch

from .test_resources import (
    ALFA_PENDULAR,
    COIMBRA,
    INTERCIDADES,
    LISBOA,
    PORTO,
    FakeProviderClient,
    lisbon_time,
    make_stopover,
    make_trip,
)


@pytest.fixture(autouse=True, name="service_name_patch")
def fixture_service_name_patch(monkeypatch: MonkeyPatch) -> Iterator[None]:
    """
    process loggers read SERVICE_NAME from the environment. pin it so log
    lines written during tests look the same on every machine.
    """
    monkeypatch.setenv("SERVICE_NAME", "cp_gtfs_test")
    yield


@pytest.fixture(name="fake_client")
def fixture_fake_client() -> FakeProviderClient:
    """
    provider with three stations over two service days (2020-01-01 and
    2020-01-02). trip 123 is seen at every station on both days, 456 only at
    coimbra and porto on the second day, 789 is malformed and 999 fails.
    """
    day_1 = date(2020, 1, 1)
    day_2 = date(2020, 1, 2)

    stopovers = {
        (LISBOA.id, day_1): [make_stopover(LISBOA, "123", INTERCIDADES)],
        (COIMBRA.id, day_1): [
            make_stopover(COIMBRA, "123", INTERCIDADES),
            make_stopover(COIMBRA, "999", ALFA_PENDULAR),
        ],
        (PORTO.id, day_1): [make_stopover(PORTO, "123", INTERCIDADES)],
        (LISBOA.id, day_2): [make_stopover(LISBOA, "123", INTERCIDADES)],
        (COIMBRA.id, day_2): [
            make_stopover(COIMBRA, "456", ALFA_PENDULAR),
            make_stopover(COIMBRA, "789", ALFA_PENDULAR),
        ],
        (PORTO.id, day_2): [make_stopover(PORTO, "456", ALFA_PENDULAR)],
    }

    trips = {
        "123": make_trip(
            "123",
            INTERCIDADES,
            [
                (LISBOA.id, None, lisbon_time(2020, 1, 1, 22, 30)),
                (COIMBRA.id, lisbon_time(2020, 1, 1, 23, 58), lisbon_time(2020, 1, 2, 0, 2)),
                (PORTO.id, lisbon_time(2020, 1, 2, 1, 10), None),
            ],
        ),
        "456": make_trip(
            "456",
            ALFA_PENDULAR,
            [
                (COIMBRA.id, None, lisbon_time(2020, 1, 2, 8, 0)),
                (PORTO.id, lisbon_time(2020, 1, 2, 9, 5), None),
            ],
        ),
        "789": make_trip("789", ALFA_PENDULAR, []),
    }

    return FakeProviderClient(
        stations=[LISBOA, COIMBRA, PORTO],
        stopovers=stopovers,
        trips=trips,
        failing_trips={"999"},
    )
