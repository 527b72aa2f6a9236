import io
import unittest
from unittest.mock import patch

from core.dispatcher import SubtitleDispatcher, ParseAttempt, ordinal_compare
from core.errors import (
    AllParsersFailed,
    CandidateParseFailed,
    InvalidEncodingError,
    InvalidStreamError,
    SubtitleFormatError,
)
from core.format_registry import FormatRegistry
from core.subtitle_formats import SubtitleEntry, SubtitleParser
from utils.constants import (
    SubtitleFormat,
    SUBRIP_FORMAT,
    SUBVIEWER_FORMAT,
    SUBSTATIONALPHA_FORMAT,
    ADVANCED_SUBSTATIONALPHA_FORMAT,
    WEBVTT_FORMAT,
    PREVIEW_HEADER,
)

from samples import SRT_TEXT, SUBVIEWER_TEXT, VTT_TEXT, NonSeekableStream, UnreadableStream, stream_of


class FakeParser(SubtitleParser):
    """Parser double that records calls and returns or raises a fixed outcome."""

    def __init__(self, subtitle_format, entries=None, error=None, log=None):
        self.format = subtitle_format
        self.entries = entries
        self.error = error
        self.log = log if log is not None else []
        self.positions = []

    def parse_stream(self, stream, encoding):
        self.log.append(self.format.name)
        self.positions.append(stream.tell())
        stream.read(3)
        if self.error is not None:
            raise self.error
        return self.entries


ALPHA = SubtitleFormat("Alpha", ".a")
BETA = SubtitleFormat("Beta", ".b")
GAMMA = SubtitleFormat("Gamma", ".c")


class TestOrdinalCompare(unittest.TestCase):
    def test_signed_distance(self):
        self.assertEqual(ordinal_compare("SubRip", "SubRip"), 0)
        self.assertEqual(ordinal_compare("SubViewer", "SubRip"), 4)
        self.assertEqual(ordinal_compare("SubRip", "SubViewer"), -4)
        self.assertEqual(ordinal_compare("Sub", "SubRip"), -3)


class TestCandidateOrdering(unittest.TestCase):
    def setUp(self):
        self.dispatcher = SubtitleDispatcher()

    def _names(self, hint):
        return [f.name for f, _ in self.dispatcher.order_candidates(hint)]

    def test_default_hint_orders_from_subrip(self):
        self.assertEqual(self._names(None), [
            "SubRip", "SubStationAlpha", "SubViewer", "WebVTT", "AdvancedSubStationAlpha",
        ])

    def test_hinted_format_comes_first(self):
        for subtitle_format in self.dispatcher.registry.list_formats():
            self.assertEqual(self.dispatcher.order_candidates(subtitle_format)[0][0], subtitle_format)

    def test_ties_keep_registration_order(self):
        self.assertEqual(self._names(WEBVTT_FORMAT), [
            "WebVTT", "SubRip", "SubViewer", "SubStationAlpha", "AdvancedSubStationAlpha",
        ])

    def test_different_hints_give_different_orders(self):
        self.assertNotEqual(self._names(SUBVIEWER_FORMAT), self._names(SUBRIP_FORMAT))
        self.assertEqual(self._names(SUBVIEWER_FORMAT)[:3], ["SubViewer", "SubStationAlpha", "SubRip"])

    def test_ordering_does_not_change_the_registry(self):
        before = self.dispatcher.registry.entries()
        self.dispatcher.order_candidates(ADVANCED_SUBSTATIONALPHA_FORMAT)
        self.assertEqual(self.dispatcher.registry.entries(), before)


class TestParseWithBundledParsers(unittest.TestCase):
    def setUp(self):
        self.dispatcher = SubtitleDispatcher()

    def test_hinted_dialect_parses_on_first_attempt(self):
        with patch.object(SubtitleDispatcher, "_attempt", wraps=self.dispatcher._attempt) as attempt:
            entries = self.dispatcher.parse(stream_of(SUBVIEWER_TEXT), hint=SUBVIEWER_FORMAT)

        self.assertEqual(attempt.call_count, 1)
        self.assertEqual(entries[1].lines, ("Two lines", "of text."))

    def test_non_seekable_stream_gives_same_result(self):
        seekable = self.dispatcher.parse(stream_of(SRT_TEXT))
        piped = self.dispatcher.parse(NonSeekableStream(SRT_TEXT.encode("utf-8")))
        self.assertEqual(piped, seekable)

    def test_falls_back_when_hint_is_wrong(self):
        entries = self.dispatcher.parse(stream_of(SRT_TEXT), hint=SUBVIEWER_FORMAT)
        self.assertEqual([e.index for e in entries], [1, 2, 3])

    def test_webvtt_hint_from_file_name(self):
        hint = self.dispatcher.detect_format("clip.vtt")
        entries = self.dispatcher.parse(stream_of(VTT_TEXT), "utf-8", hint)
        self.assertEqual(len(entries), 2)

    def test_strict_policy_reports_hinted_failure_with_preview(self):
        dispatcher = SubtitleDispatcher(stop_on_first_failure=True)

        with self.assertRaises(CandidateParseFailed) as ctx:
            dispatcher.parse(stream_of(SRT_TEXT), hint=SUBVIEWER_FORMAT)

        failure = ctx.exception
        self.assertEqual(failure.format, SUBVIEWER_FORMAT)
        self.assertIsInstance(failure.cause, SubtitleFormatError)
        self.assertIs(failure.__cause__, failure.cause)
        self.assertIn("00:00:01,000 --> 00:00:03,500", failure.preview)
        self.assertIn(PREVIEW_HEADER, str(failure))

    def test_all_parsers_failing_lists_every_attempt(self):
        with self.assertRaises(AllParsersFailed) as ctx:
            self.dispatcher.parse(stream_of("just some words\n"))

        error = ctx.exception
        self.assertEqual(error.formats, (
            SUBRIP_FORMAT, SUBSTATIONALPHA_FORMAT, SUBVIEWER_FORMAT,
            WEBVTT_FORMAT, ADVANCED_SUBSTATIONALPHA_FORMAT,
        ))
        self.assertTrue(error.preview.endswith("just some words\n"))

    def test_preview_is_capped(self):
        dispatcher = SubtitleDispatcher(preview_chars=10)
        with self.assertRaises(AllParsersFailed) as ctx:
            dispatcher.parse(stream_of("x" * 2000))
        self.assertEqual(ctx.exception.preview, f"{PREVIEW_HEADER}\n{'x' * 10}")

    def test_wrong_encoding_is_a_candidate_failure(self):
        data = "1\n00:00:01,000 --> 00:00:02,000\nÇa va?\n".encode("cp1252")
        with self.assertRaises(AllParsersFailed) as ctx:
            self.dispatcher.parse(io.BytesIO(data), "utf-8")
        self.assertIsInstance(ctx.exception.failures[0].cause, UnicodeDecodeError)

        entries = self.dispatcher.parse(io.BytesIO(data), "cp1252")
        self.assertEqual(entries[0].lines, ("Ça va?",))

    def test_parse_file_uses_extension_hint(self):
        import tempfile
        from pathlib import Path

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "movie.sub"
            path.write_text(SUBVIEWER_TEXT, encoding="utf-8")
            entries = self.dispatcher.parse_file(path)
        self.assertEqual(entries[0], SubtitleEntry(1000, 3500, ("Hello there.",)))


class TestParseInvalidInput(unittest.TestCase):
    def setUp(self):
        self.log = []
        self.parser = FakeParser(ALPHA, entries=[SubtitleEntry(0, 1)], log=self.log)
        self.dispatcher = SubtitleDispatcher(FormatRegistry([(ALPHA, self.parser)]))

    def test_empty_stream_is_rejected_before_any_attempt(self):
        with self.assertRaises(InvalidStreamError):
            self.dispatcher.parse(io.BytesIO(b""))
        with self.assertRaises(InvalidStreamError):
            self.dispatcher.parse(NonSeekableStream(b""))
        self.assertEqual(self.log, [])

    def test_unreadable_streams_are_rejected(self):
        closed = io.BytesIO(b"data")
        closed.close()
        for stream in (closed, UnreadableStream(), None):
            with self.assertRaises(InvalidStreamError):
                self.dispatcher.parse(stream)
        self.assertEqual(self.log, [])

    def test_text_streams_are_rejected(self):
        with self.assertRaises(InvalidStreamError):
            self.dispatcher.parse(io.StringIO(SRT_TEXT))

    def test_unknown_encoding_is_rejected(self):
        with self.assertRaises(InvalidEncodingError):
            self.dispatcher.parse(io.BytesIO(b"data"), "no-such-encoding")
        self.assertEqual(self.log, [])

    def test_non_text_codecs_are_rejected(self):
        for encoding in ("base64", "hex", "rot13"):
            with self.assertRaises(InvalidEncodingError):
                self.dispatcher.parse(io.BytesIO(SRT_TEXT.encode("utf-8")), encoding)
        self.assertEqual(self.log, [])


class TestDispatchLoop(unittest.TestCase):
    def setUp(self):
        self.log = []

    def _dispatcher(self, *parsers, **kwargs):
        return SubtitleDispatcher(FormatRegistry([(p.format, p) for p in parsers]), **kwargs)

    def test_first_success_wins_and_stops(self):
        alpha = FakeParser(ALPHA, error=SubtitleFormatError("no"), log=self.log)
        beta = FakeParser(BETA, entries=[SubtitleEntry(0, 1, ("b",))], log=self.log)
        gamma = FakeParser(GAMMA, entries=[SubtitleEntry(0, 1, ("c",))], log=self.log)

        entries = self._dispatcher(alpha, beta, gamma).parse(io.BytesIO(b"content"))

        self.assertEqual(entries[0].lines, ("b",))
        self.assertEqual(self.log, ["Alpha", "Beta"])

    def test_each_attempt_starts_at_the_beginning(self):
        alpha = FakeParser(ALPHA, error=ValueError("no"), log=self.log)
        beta = FakeParser(BETA, error=IndexError("no"), log=self.log)
        gamma = FakeParser(GAMMA, entries=[SubtitleEntry(0, 1)], log=self.log)

        stream = NonSeekableStream(b"content")
        self._dispatcher(alpha, beta, gamma).parse(stream)

        self.assertEqual(alpha.positions + beta.positions + gamma.positions, [0, 0, 0])

    def test_empty_result_is_not_a_success(self):
        alpha = FakeParser(ALPHA, entries=[], log=self.log)
        beta = FakeParser(BETA, entries=None, log=self.log)

        with self.assertRaises(AllParsersFailed) as ctx:
            self._dispatcher(alpha, beta).parse(io.BytesIO(b"content"))

        self.assertEqual(self.log, ["Alpha", "Beta"])
        self.assertTrue(all(isinstance(f.cause, SubtitleFormatError) for f in ctx.exception.failures))

    def test_strict_policy_stops_after_first_failure(self):
        alpha = FakeParser(ALPHA, error=SubtitleFormatError("bad alpha"), log=self.log)
        beta = FakeParser(BETA, entries=[SubtitleEntry(0, 1)], log=self.log)

        with self.assertRaises(CandidateParseFailed) as ctx:
            self._dispatcher(alpha, beta, stop_on_first_failure=True).parse(io.BytesIO(b"content"))

        self.assertEqual(self.log, ["Alpha"])
        self.assertIn("bad alpha", str(ctx.exception))

    def test_no_candidate_is_tried_twice(self):
        parsers = [FakeParser(f, error=SubtitleFormatError("no"), log=self.log) for f in (ALPHA, BETA, GAMMA)]
        with self.assertRaises(AllParsersFailed):
            self._dispatcher(*parsers).parse(io.BytesIO(b"content"), hint=GAMMA)
        self.assertEqual(sorted(self.log), ["Alpha", "Beta", "Gamma"])
        self.assertEqual(self.log[0], "Gamma")

    def test_buffered_copy_is_closed_and_caller_stream_left_open(self):
        alpha = FakeParser(ALPHA, entries=[SubtitleEntry(0, 1)], log=self.log)
        dispatcher = self._dispatcher(alpha)

        caller_stream = io.BytesIO(b"content")
        dispatcher.parse(caller_stream)
        self.assertFalse(caller_stream.closed)

        with patch("core.dispatcher.ensure_seekable", return_value=io.BytesIO(b"content")) as buffered:
            dispatcher.parse(NonSeekableStream(b"content"))
        self.assertTrue(buffered.return_value.closed)

    def test_parse_with_explicit_candidates(self):
        alpha = FakeParser(ALPHA, entries=[SubtitleEntry(0, 1, ("a",))], log=self.log)
        beta = FakeParser(BETA, entries=[SubtitleEntry(0, 1, ("b",))], log=self.log)
        dispatcher = self._dispatcher(alpha, beta)

        entries = dispatcher.parse_with_candidates(io.BytesIO(b"content"), "utf-8", [(BETA, beta)])

        self.assertEqual(entries[0].lines, ("b",))
        self.assertEqual(self.log, ["Beta"])


class TestParseAttempt(unittest.TestCase):
    def test_succeeded_flag(self):
        self.assertTrue(ParseAttempt(ALPHA, entries=[SubtitleEntry(0, 1)]).succeeded)
        self.assertFalse(ParseAttempt(ALPHA, error=ValueError("x")).succeeded)


if __name__ == "__main__":
    unittest.main()
