"""Unit tests for the offer registry."""

import threading

from peerlink.transfer.registry import Offer, OfferRegistry
from peerlink.transfer.allocator import DYNAMIC_PORT_START, DYNAMIC_PORT_END


class SequenceAllocator:
    """Allocator stub returning a fixed sequence of codes."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def generate_code(self):
        self.calls += 1
        return self.codes.pop(0)


class TestOffer:

    def test_file_name_is_basename(self):
        offer = Offer(code=50000, file_path='/srv/uploads/abc_report.pdf')
        assert offer.file_name == 'abc_report.pdf'


class TestOfferRegistry:

    def test_offer_returns_code_in_range(self, registry, sample_file):
        code = registry.offer(str(sample_file))
        assert DYNAMIC_PORT_START <= code <= DYNAMIC_PORT_END

    def test_offer_stores_path_as_given(self):
        registry = OfferRegistry(SequenceAllocator([50000]))
        registry.offer('/does/not/exist.txt')

        assert registry.get(50000) == Offer(code=50000, file_path='/does/not/exist.txt')

    def test_registered_code_is_drawn_again(self):
        allocator = SequenceAllocator([50000, 50000, 50000, 50001])
        registry = OfferRegistry(allocator)

        assert registry.offer('/tmp/a') == 50000
        assert registry.offer('/tmp/b') == 50001
        assert allocator.calls == 4
        assert registry.get(50000).file_path == '/tmp/a'
        assert registry.get(50001).file_path == '/tmp/b'

    def test_get_unknown_code(self, registry):
        assert registry.get(12345) is None
        assert 12345 not in registry

    def test_evict(self):
        registry = OfferRegistry(SequenceAllocator([50000]))
        registry.offer('/tmp/a')

        evicted = registry.evict(50000)

        assert evicted.file_path == '/tmp/a'
        assert 50000 not in registry
        assert len(registry) == 0
        assert registry.evict(50000) is None

    def test_concurrent_offers_get_distinct_codes(self, registry, tmp_path):
        codes = []
        lock = threading.Lock()

        def worker(i):
            code = registry.offer(str(tmp_path / f'file{i}.txt'))
            with lock:
                codes.append(code)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(codes) == 40
        assert len(set(codes)) == 40
        assert len(registry) == 40
