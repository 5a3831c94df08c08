import unittest
from opening_drills.study.parsers.pgn_sanitizer import PGNSanitizer

GAME = """[Event "Italian Game"]
[White "Repertoire"]
[Event "Duplicate"]
[Annotator "Coach \\"Quote\\" Smith"]

1. e4 {Main move [%csl Ge4]} e5 2. Nf3 ; develop
Nc6 *"""


class TestPGNSanitizer(unittest.TestCase):
    def test_parse_headers_first_key_wins(self):
        headers = PGNSanitizer.parse_headers(GAME)
        self.assertEqual(headers["Event"], "Italian Game")
        self.assertEqual(headers["White"], "Repertoire")
        self.assertEqual(headers["Annotator"], 'Coach "Quote" Smith')

    def test_strip_headers_keeps_markup(self):
        movetext = PGNSanitizer.strip_headers(GAME)
        self.assertTrue(movetext.startswith("1. e4"))
        self.assertIn("[%csl Ge4]", movetext)
        self.assertNotIn("[Event", movetext)

    def test_strip_comments(self):
        text = PGNSanitizer.strip_comments(PGNSanitizer.strip_headers(GAME))
        self.assertEqual(text.split(), ["1.", "e4", "e5", "2.", "Nf3", "Nc6", "*"])

    def test_first_comment(self):
        self.assertEqual(PGNSanitizer.first_comment(GAME), "Main move [%csl Ge4]")
        self.assertIsNone(PGNSanitizer.first_comment("1. e4 e5"))


if __name__ == '__main__':
    unittest.main()
