import io
import unittest

from core.errors import SubtitleFormatError
from core.subtitle_formats import (
    SubtitleEntry,
    SubRipParser,
    SubViewerParser,
    SubStationAlphaParser,
    WebVTTParser,
)
from utils.constants import SUBRIP_FORMAT, SUBVIEWER_FORMAT, SUBSTATIONALPHA_FORMAT, WEBVTT_FORMAT

from samples import SRT_TEXT, SUBVIEWER_TEXT, ASS_TEXT, VTT_TEXT, stream_of


class TestSubtitleEntry(unittest.TestCase):
    def test_derived_values(self):
        entry = SubtitleEntry(1500, 4000, ("Hello", "world"), 7)
        self.assertEqual(entry.start, 1.5)
        self.assertEqual(entry.end, 4.0)
        self.assertEqual(entry.duration(), 2.5)
        self.assertEqual(entry.text, "Hello\nworld")
        self.assertEqual(entry.format_time_range('srt'), "00:00:01,500 --> 00:00:04,000")
        self.assertEqual(entry.format_time_range(), "00:00:01.500 --> 00:00:04.000")
        self.assertEqual(entry.to_dict()["lines"], ["Hello", "world"])


class TestSubRipParser(unittest.TestCase):
    def setUp(self):
        self.parser = SubRipParser(SUBRIP_FORMAT)

    def test_parses_entries_in_file_order(self):
        entries = self.parser.parse_stream(stream_of(SRT_TEXT), "utf-8")

        self.assertEqual([e.index for e in entries], [1, 2, 3])
        self.assertEqual(entries[0], SubtitleEntry(1000, 3500, ("Hello there.",), 1))
        self.assertEqual(entries[1].lines, ("Two lines", "of text."))
        self.assertEqual(entries[2].start_time, 3723004)

    def test_handles_bom_and_windows_line_endings(self):
        data = b"\xef\xbb\xbf" + SRT_TEXT.replace("\n", "\r\n").encode("utf-8")
        entries = self.parser.parse_stream(io.BytesIO(data), "utf-8")
        self.assertEqual(len(entries), 3)
        self.assertEqual(entries[0].index, 1)

    def test_skips_malformed_blocks(self):
        text = "1\nnot a time --> at all\nBroken\n\n" + SRT_TEXT
        entries = self.parser.parse_stream(stream_of(text), "utf-8")
        self.assertEqual(len(entries), 3)

    def test_rejects_content_without_entries(self):
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of(SUBVIEWER_TEXT), "utf-8")

    def test_skips_entries_without_text(self):
        text = "1\n00:00:00,500 --> 00:00:00,900\n\n" + SRT_TEXT
        entries = self.parser.parse_stream(stream_of(text), "utf-8")
        self.assertEqual([e.index for e in entries], [1, 2, 3])

        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of("1\n00:00:00,500 --> 00:00:00,900\n"), "utf-8")

    def test_decodes_with_the_given_encoding(self):
        text = "1\n00:00:01,000 --> 00:00:02,000\nÇa va?\n"
        entries = self.parser.parse_stream(stream_of(text, "cp1252"), "cp1252")
        self.assertEqual(entries[0].lines, ("Ça va?",))

        with self.assertRaises(UnicodeDecodeError):
            self.parser.parse_stream(stream_of(text, "cp1252"), "utf-8")

    def test_does_not_close_the_stream(self):
        stream = stream_of(SRT_TEXT)
        self.parser.parse_stream(stream, "utf-8")
        self.assertFalse(stream.closed)


class TestSubViewerParser(unittest.TestCase):
    def setUp(self):
        self.parser = SubViewerParser(SUBVIEWER_FORMAT)

    def test_parses_entries_after_header(self):
        entries = self.parser.parse_stream(stream_of(SUBVIEWER_TEXT), "utf-8")
        self.assertEqual(entries, [
            SubtitleEntry(1000, 3500, ("Hello there.",)),
            SubtitleEntry(4000, 6250, ("Two lines", "of text.")),
        ])

    def test_last_entry_without_trailing_newline(self):
        text = "00:00:01.00,00:00:02.00\nOnly line"
        entries = self.parser.parse_stream(stream_of(text), "utf-8")
        self.assertEqual(entries[0].lines, ("Only line",))

    def test_skips_entries_without_text(self):
        text = "00:00:00.10,00:00:00.20\n\n00:00:01.00,00:00:02.00\nOnly line\n"
        entries = self.parser.parse_stream(stream_of(text), "utf-8")
        self.assertEqual(entries, [SubtitleEntry(1000, 2000, ("Only line",))])

    def test_rejects_subrip_content(self):
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of(SRT_TEXT), "utf-8")


class TestSubStationAlphaParser(unittest.TestCase):
    def setUp(self):
        self.parser = SubStationAlphaParser(SUBSTATIONALPHA_FORMAT)

    def test_parses_dialogue_lines(self):
        entries = self.parser.parse_stream(stream_of(ASS_TEXT), "utf-8")
        self.assertEqual(entries, [
            SubtitleEntry(1000, 3500, ("Hello, there.",)),
            SubtitleEntry(4000, 6250, ("Two lines", "of text.")),
        ])

    def test_uses_field_order_from_format_line(self):
        text = (
            "[Events]\n"
            "Format: Start, End, Text\n"
            "Dialogue: 0:00:02.00,0:00:03.00,Reordered, with comma\n"
        )
        entries = self.parser.parse_stream(stream_of(text), "utf-8")
        self.assertEqual(entries, [SubtitleEntry(2000, 3000, ("Reordered, with comma",))])

    def test_rejects_content_without_events_section(self):
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of(SRT_TEXT), "utf-8")

    def test_rejects_events_section_without_dialogue(self):
        text = "[Events]\nFormat: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of(text), "utf-8")


class TestWebVTTParser(unittest.TestCase):
    def setUp(self):
        self.parser = WebVTTParser(WEBVTT_FORMAT)

    def test_parses_cues_and_skips_notes(self):
        entries = self.parser.parse_stream(stream_of(VTT_TEXT), "utf-8")
        self.assertEqual(entries, [
            SubtitleEntry(1000, 3500, ("Hello there.",), 1),
            SubtitleEntry(4000, 6250, ("Two lines", "of text.")),
        ])

    def test_requires_header(self):
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of(SRT_TEXT), "utf-8")

    def test_header_only_is_rejected(self):
        with self.assertRaises(SubtitleFormatError):
            self.parser.parse_stream(stream_of("WEBVTT\n"), "utf-8")


if __name__ == "__main__":
    unittest.main()
