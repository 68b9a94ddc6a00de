import tempfile
import unittest
from pathlib import Path

from iceminus.core.errors import WordListLoadError
from iceminus.core.word_set import (
    DEFAULT_WORDLIST_PATH,
    WordSet,
    is_default_source,
    load_word_set,
)


class WordSetTest(unittest.TestCase):
    def test_from_text_trims_and_drops_blank_lines(self):
        words = WordSet.from_text("  密码 \n\n\tsecret\r\n   \nsecret\n")
        self.assertEqual(words.words, ("密码", "secret", "secret"))

    def test_matches_returns_words_in_list_order(self):
        words = WordSet(["b", "a", "zz"])
        self.assertEqual(words.matches("a then b"), ["b", "a"])
        self.assertEqual(words.matches("nothing here"), [])

    def test_matches_ignores_comment_marker(self):
        words = WordSet(["secret"])
        self.assertEqual(words.matches("# secret"), ["secret"])

    def test_empty_set_is_falsy(self):
        self.assertFalse(WordSet.from_text("\n \n"))
        self.assertEqual(len(WordSet([])), 0)

    def test_default_source_predicate(self):
        self.assertTrue(is_default_source(None))
        self.assertTrue(is_default_source(""))
        self.assertTrue(is_default_source("sensitive_words.txt"))
        self.assertFalse(is_default_source("other/sensitive_words.txt"))


class LoadWordSetTest(unittest.TestCase):
    def test_load_external_file_strips_bom(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "words.txt"
            path.write_bytes("\ufeff密码\nsecret\n".encode("utf-8"))
            words = load_word_set(str(path))
        self.assertEqual(list(words), ["密码", "secret"])

    def test_default_name_uses_injected_default(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            default = Path(tmpdir) / "bundled.txt"
            default.write_text("alpha\nbeta\n", encoding="utf-8")
            words = load_word_set("sensitive_words.txt", default_source=default)
        self.assertEqual(list(words), ["alpha", "beta"])

    def test_packaged_default_is_not_empty(self):
        self.assertTrue(DEFAULT_WORDLIST_PATH.exists())
        self.assertTrue(load_word_set())

    def test_missing_file_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(WordListLoadError):
                load_word_set(str(Path(tmpdir) / "missing.txt"))


if __name__ == "__main__":
    unittest.main()
