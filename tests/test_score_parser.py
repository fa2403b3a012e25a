import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from propgen.proposals.score_parser import parse  # noqa: E402


class ScoreParserTests(unittest.TestCase):
    def test_splits_score_line_from_body(self):
        parsed = parse("Match Score: X\n\nBODY")
        self.assertEqual(parsed.score, "Match Score: X")
        self.assertEqual(parsed.body, "BODY")

    def test_realistic_response(self):
        text = (
            "Match Score: 82% — Strong TikTok Shop overlap, light on wellness.  \n"
            "\n"
            "Hey there,\n"
            "\n"
            "I've scaled three DTC brands on TikTok Shop.\n"
            "— Sagan"
        )
        parsed = parse(text)
        self.assertEqual(parsed.score, "Match Score: 82% — Strong TikTok Shop overlap, light on wellness.")
        self.assertEqual(parsed.body, "Hey there,\n\nI've scaled three DTC brands on TikTok Shop.\n— Sagan")

    def test_text_without_prefix_is_unchanged(self):
        for text in ("Hello there", "", "  Match Score: 90%\n\nbody", "match score: 90%\n\nbody"):
            parsed = parse(text)
            self.assertIsNone(parsed.score)
            self.assertEqual(parsed.body, text)

    def test_score_line_without_line_break_degrades(self):
        text = "Match Score: 70% — decent fit"
        parsed = parse(text)
        self.assertIsNone(parsed.score)
        self.assertEqual(parsed.body, text)

    def test_single_newline_and_crlf(self):
        parsed = parse("Match Score: 55%\r\nBody line")
        self.assertEqual(parsed.score, "Match Score: 55%")
        self.assertEqual(parsed.body, "Body line")

    def test_whitespace_only_lines_are_dropped_before_body(self):
        parsed = parse("Match Score: 40%\n   \n\t\nFirst\n\nSecond")
        self.assertEqual(parsed.body, "First\n\nSecond")

    def test_score_is_first_line_of_text(self):
        text = "Match Score: 91% — great\n\nProposal"
        parsed = parse(text)
        self.assertEqual(parsed.score, text.split("\n")[0].strip())


if __name__ == "__main__":
    unittest.main()
