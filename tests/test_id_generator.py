import threading

import pytest

from jonoondb.errors import InvalidArgumentError
from jonoondb.id_generator import DocumentIDGenerator


def test_first_reservation_starts_at_zero():
    assert DocumentIDGenerator().reserve(5) == 0


def test_reservations_are_consecutive():
    gen = DocumentIDGenerator()
    first = gen.reserve(5)
    second = gen.reserve(3)
    assert second == first + 5
    assert gen.current == second + 3


def test_zero_reservation_does_not_advance():
    gen = DocumentIDGenerator(start=7)
    assert gen.reserve(0) == 7
    assert gen.reserve(1) == 7


def test_negative_count_rejected():
    with pytest.raises(InvalidArgumentError):
        DocumentIDGenerator().reserve(-1)


def test_concurrent_reservations_are_disjoint():
    gen = DocumentIDGenerator()
    starts = []
    lock = threading.Lock()

    def worker():
        for _ in range(100):
            start = gen.reserve(2)
            with lock:
                starts.append(start)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(starts) == list(range(0, 800, 2))
    assert gen.reserve(1) == 800