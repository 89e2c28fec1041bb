import os
import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, os.fspath(PROJECT_ROOT))

from doubles import FakeClock  # noqa: E402
from wordscramble.session import DEFAULT_WORDS, GameSession  # noqa: E402


class TestWordCatalog(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.session = GameSession(clock=self.clock)

    def test_defaults_seeded_in_order(self) -> None:
        self.assertEqual(("puzzle", "challenge", "example", "solution"), DEFAULT_WORDS)
        self.assertEqual(DEFAULT_WORDS, self.session.words)

    def test_add_word_trims_and_keeps_case(self) -> None:
        self.assertTrue(self.session.add_word("  Banana\t\n"))
        self.assertEqual("Banana", self.session.words[-1])

    def test_rejects_bad_shapes(self) -> None:
        for word in ("", "   ", "a", "x" * 21, "two words", "café", "abc1", "hyphen-ated"):
            with self.subTest(word=word):
                self.assertFalse(self.session.add_word(word))
        self.assertEqual(4, len(self.session.words))

    def test_length_bounds_are_inclusive(self) -> None:
        self.assertTrue(self.session.add_word("ox"))
        self.assertTrue(self.session.add_word("y" * 20))

    def test_case_varied_duplicates_rejected(self) -> None:
        for word in ("ox", "Kettle", "zigzag", "QuIcKsIlVeR"):
            with self.subTest(word=word):
                self.assertTrue(self.session.add_word(word))
                self.assertFalse(self.session.add_word(word.swapcase()))
                self.assertFalse(self.session.add_word(word.upper()))

    def test_only_ascii_whitespace_is_trimmed(self) -> None:
        for word in ("\u00a0word", "word\u00a0", "\x0bword", "word\x0c", "\u2003word"):
            with self.subTest(word=word):
                self.assertFalse(self.session.add_word(word))
        self.assertTrue(self.session.add_word(" \t\r\nword\r\n"))
        self.assertEqual("word", self.session.words[-1])

    def test_non_ascii_case_folds_are_not_duplicates(self) -> None:
        self.assertTrue(self.session.add_word("kick"))
        self.assertFalse(self.session.add_word("\u212aick"))
        self.assertEqual(5, len(self.session.words))

    def test_default_word_duplicate_rejected(self) -> None:
        self.assertFalse(self.session.add_word("Solution"))
        self.assertEqual(1, sum(1 for w in self.session.words if w.lower() == "solution"))

    def test_memory_estimate_follows_catalog(self) -> None:
        # 4 words * 32 + 30 letters + 4 keys * 32
        self.assertEqual(286, self.session.metrics.total_memory)
        self.session.add_word("banana")
        metrics = self.session.metrics
        self.assertEqual(286 + 32 + 6 + 32, metrics.total_memory)
        self.assertEqual(metrics.total_memory, metrics.peak_memory)

    def test_player_name_counts_toward_memory(self) -> None:
        self.session.set_player_name("Ada")
        self.assertEqual(289, self.session.metrics.total_memory)
        self.session.set_player_name("")
        self.assertEqual(286, self.session.metrics.total_memory)
        self.assertEqual(289, self.session.metrics.peak_memory)


class TestLoadWordsFromFile(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "words.txt")
        self.session = GameSession(clock=FakeClock())

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_loads_valid_lines_and_skips_the_rest(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("apple\n\n  Cherry  \nPUZZLE\nx\nnot valid\nbanana\napple\n")

        self.assertTrue(self.session.load_words_from_file(self.path))
        self.assertEqual(("apple", "Cherry", "banana"), self.session.words[4:])
        metrics = self.session.metrics
        self.assertEqual(1, metrics.file_operations)
        self.assertEqual(0.0, metrics.total_file_io_time)

    def test_missing_file_fails_without_counting(self) -> None:
        missing = os.path.join(self.temp_dir.name, "nope.txt")
        self.assertFalse(self.session.load_words_from_file(missing))
        self.assertEqual(0, self.session.metrics.file_operations)
        self.assertEqual(4, len(self.session.words))

    def test_io_time_accumulates_in_milliseconds(self) -> None:
        clock = FakeClock()

        class SlowFile:
            def __init__(self, lines):
                self.lines = lines

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def __iter__(self):
                for line in self.lines:
                    clock.advance(0.25)
                    yield line

        session = GameSession(clock=clock)
        session._open = lambda path, mode, **kw: SlowFile(["kiwi\n", "mango\n"])
        self.assertTrue(session.load_words_from_file("ignored"))
        self.assertEqual(500.0, session.metrics.total_file_io_time)


if __name__ == "__main__":
    unittest.main()
