import asyncio
import sys
import threading
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from propgen.core.errors import PersistenceFailure  # noqa: E402
from propgen.proposals.duplicates import DuplicateDetector  # noqa: E402
from propgen.proposals.normalizer import fingerprint  # noqa: E402
from propgen.store.db import Store  # noqa: E402

JOB = (
    "We are a fast-growing skincare brand looking for a TikTok Shop expert to set up our shop, "
    "recruit affiliates and run Spark Ads. You will own weekly reporting and creative testing."
)


class _BrokenStore(Store):
    def find_proposal_ids_with_prefix(self, user_id, prefix, limit=1):
        raise PersistenceFailure("database is locked")


class _SlowStore(Store):
    """Lookup that waits until the event loop has run another task."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.released = threading.Event()
        self.released_in_time = False

    def find_proposal_ids_with_prefix(self, user_id, prefix, limit=1):
        self.released_in_time = self.released.wait(timeout=2)
        return super().find_proposal_ids_with_prefix(user_id, prefix, limit=limit)


class DuplicateDetectorTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = Store(":memory:")
        self.detector = DuplicateDetector(self.store, "user-1", prefix_chars=100)

    def tearDown(self):
        self.store.close()

    def _save(self, description: str, user_id: str = "user-1") -> None:
        self.store.insert_proposal(
            user_id=user_id,
            job_description=description,
            proposal_text="Match Score: 80% — fit\n\nHello",
            match_score="Match Score: 80% — fit",
        )

    def test_job_fixture_is_longer_than_fingerprint(self):
        self.assertGreater(len(JOB), 100)

    async def test_first_submission_is_not_duplicate(self):
        self.assertFalse(await self.detector.is_duplicate(JOB))

    async def test_identical_description_is_duplicate(self):
        self._save(JOB)
        self.assertTrue(await self.detector.is_duplicate(JOB))

    async def test_change_after_fingerprint_still_duplicate(self):
        self._save(JOB)
        edited = JOB[:100] + "X" + JOB[101:] + " Budget is flexible."
        self.assertTrue(await self.detector.is_duplicate(edited))

    async def test_change_inside_fingerprint_is_not_duplicate(self):
        self._save(JOB)
        edited = JOB[:50] + "#" + JOB[51:]
        self.assertFalse(await self.detector.is_duplicate(edited))

    async def test_comparison_ignores_case(self):
        self._save(JOB)
        self.assertTrue(await self.detector.is_duplicate(JOB.upper()))

    async def test_short_text_matches_longer_saved_description(self):
        self._save(JOB)
        self.assertTrue(await self.detector.is_duplicate(JOB[:40]))

    async def test_other_users_history_is_ignored(self):
        self._save(JOB, user_id="user-2")
        self.assertFalse(await self.detector.is_duplicate(JOB))

    async def test_like_wildcards_are_literal(self):
        self._save("100% remote role for Shopify_expert")
        self.assertFalse(await self.detector.is_duplicate("1%"))
        self.assertFalse(await self.detector.is_duplicate("100% remote role for Shopify-expert"))
        self.assertTrue(await self.detector.is_duplicate("100% REMOTE role for shopify_EXPERT"))

    async def test_lookup_failure_fails_open(self):
        store = _BrokenStore(":memory:")
        try:
            detector = DuplicateDetector(store, "user-1")
            with self.assertLogs("propgen.proposals.duplicates", level="WARNING"):
                self.assertFalse(await detector.is_duplicate(JOB))
        finally:
            store.close()

    async def test_empty_text_rejected(self):
        with self.assertRaises(ValueError):
            await self.detector.is_duplicate("")

    async def test_lookup_runs_off_the_event_loop(self):
        store = _SlowStore(":memory:")
        detector = DuplicateDetector(store, "user-1", prefix_chars=100)

        async def release():
            await asyncio.sleep(0)
            store.released.set()

        try:
            duplicate, _ = await asyncio.gather(detector.is_duplicate(JOB), release())
        finally:
            store.close()

        self.assertFalse(duplicate)
        self.assertTrue(store.released_in_time)


class FingerprintTests(unittest.TestCase):
    def test_fingerprint_is_prefix(self):
        self.assertEqual(fingerprint(JOB), JOB[:100])
        self.assertEqual(fingerprint("short"), "short")


if __name__ == "__main__":
    unittest.main()
