from django.core.cache import cache
from django.test import SimpleTestCase

from apps.redesign.ratelimit import RateLimiter

class RateLimiterTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.limiter = RateLimiter("test", max_requests=3, window_seconds=60)

    def test_blocks_after_max_requests(self):
        now = 1000.0
        self.assertEqual([self.limiter.check(1, now=now) for _ in range(4)], [True, True, True, False])
        self.assertEqual(self.limiter.remaining(1, now=now), 0)
        self.assertEqual(self.limiter.seconds_until_reset(1, now=now + 10), 50)

    def test_window_resets(self):
        for _ in range(3):
            self.limiter.check(1, now=1000.0)
        self.assertFalse(self.limiter.check(1, now=1059.0))
        self.assertTrue(self.limiter.check(1, now=1060.0))

    def test_identities_are_independent(self):
        for _ in range(3):
            self.limiter.check(1, now=1000.0)
        self.assertTrue(self.limiter.check(2, now=1000.0))
        self.assertEqual(self.limiter.remaining(2, now=1000.0), 2)
