"""
Command-line interface for the Subtitle Dispatcher.

This module provides the CLI commands for parsing subtitle files or
standard input, guessing formats from file names and listing the
registered formats.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from utils.constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, DEFAULT_ENCODING
from utils.logging_config import setup_logging, get_logger
from utils.stream_utils import ensure_seekable
from core.dispatcher import SubtitleDispatcher
from core.encoding_detection import EncodingDetector
from core.errors import SubtitleDispatchError
from core.subtitle_formats import SubtitleEntry

logger = get_logger(__name__)

STDIN_MARKER = '-'
AUTO_ENCODING = 'auto'


def setup_cli_logging(verbose: bool = False, debug: bool = False,
                      use_colors: bool = True, log_file: Optional[Path] = None) -> logging.Logger:
    """Set up logging for CLI operations."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    return setup_logging(level=level, log_file=log_file, use_colors=use_colors)


class CLIHandler:
    """Handles command-line interface operations."""

    def __init__(self, dispatcher: Optional[SubtitleDispatcher] = None, stdout=None, stdin=None):
        self.dispatcher = dispatcher or SubtitleDispatcher()
        self.stdout = stdout or sys.stdout
        self.stdin = stdin

    def create_parser(self) -> argparse.ArgumentParser:
        """
        Create the main argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog='subdispatch',
            description=f"{APP_NAME} v{APP_VERSION}\n{APP_DESCRIPTION}",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Parse a subtitle file, using its extension as a hint
  subdispatch parse movie.srt

  # Parse with an explicit encoding and preferred format
  subdispatch parse movie.sub --encoding cp1252 --format SubViewer

  # Read from a pipe and print JSON
  cat movie.vtt | subdispatch parse - --json

  # Guess formats from file names
  subdispatch detect movie.srt episode.sub
            """
        )

        parser.add_argument('--version', action='version', version=f'{APP_NAME} {APP_VERSION}')
        parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
        parser.add_argument('-d', '--debug', action='store_true', help='Enable debug output')
        parser.add_argument('--no-colors', action='store_true', help='Disable colored output')
        parser.add_argument('--log-file', type=Path, help='Also write log output to this file')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        self._add_parse_parser(subparsers)
        self._add_detect_parser(subparsers)
        self._add_formats_parser(subparsers)

        return parser

    def _add_parse_parser(self, subparsers):
        """Add parse command parser."""
        parse_parser = subparsers.add_parser(
            'parse',
            help='Parse a subtitle file and print its entries',
            description='Parse a subtitle file (or "-" for standard input) in any supported format'
        )

        parse_parser.add_argument('input', help='Subtitle file, or "-" to read standard input')
        parse_parser.add_argument('-e', '--encoding', default=DEFAULT_ENCODING,
                                  help=f'Input encoding, or "{AUTO_ENCODING}" to detect it (default: {DEFAULT_ENCODING})')
        parse_parser.add_argument('-f', '--format', dest='format_name',
                                  help='Format to try first (default: guessed from the file extension)')
        parse_parser.add_argument('--strict', action='store_true',
                                  help='Fail on the first rejecting parser instead of trying the others')
        parse_parser.add_argument('--json', action='store_true', help='Print entries as JSON')

    def _add_detect_parser(self, subparsers):
        """Add detect command parser."""
        detect_parser = subparsers.add_parser(
            'detect',
            help='Guess subtitle formats from file names',
            description='Print the most likely subtitle format for each file name'
        )
        detect_parser.add_argument('names', nargs='+', help='File names to inspect')

    def _add_formats_parser(self, subparsers):
        """Add formats command parser."""
        subparsers.add_parser(
            'formats',
            help='List supported subtitle formats',
            description='List registered subtitle formats in priority order'
        )

    def handle_command(self, args) -> int:
        """
        Handle the parsed command-line arguments.

        Args:
            args: Parsed arguments from argparse

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        setup_cli_logging(args.verbose, args.debug, not args.no_colors, args.log_file)

        if not args.command:
            logger.error("No command specified. Use --help for usage information.")
            return 1

        try:
            if args.command == 'parse':
                return self._handle_parse(args)
            elif args.command == 'detect':
                return self._handle_detect(args)
            elif args.command == 'formats':
                return self._handle_formats(args)
            else:
                logger.error(f"Unknown command: {args.command}")
                return 1

        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1
        except SubtitleDispatchError as e:
            logger.error(str(e))
            return 1
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            if args.debug:
                import traceback
                traceback.print_exc()
            return 1

    def _handle_parse(self, args) -> int:
        """Handle parse command."""
        dispatcher = self.dispatcher
        if args.strict and not dispatcher.stop_on_first_failure:
            dispatcher = SubtitleDispatcher(dispatcher.registry, stop_on_first_failure=True,
                                            preview_chars=dispatcher.preview_chars)

        if args.format_name:
            hint = dispatcher.registry.find_format(args.format_name)
        elif args.input == STDIN_MARKER:
            hint = dispatcher.registry.default_format
        else:
            hint = dispatcher.detect_format(args.input)

        if args.input == STDIN_MARKER:
            stdin = self.stdin if self.stdin is not None else sys.stdin.buffer
            entries = self._parse_stream(dispatcher, stdin, args.encoding, hint)
        else:
            input_path = Path(args.input)
            if not input_path.exists():
                logger.error(f"Input file not found: {input_path}")
                return 1
            with open(input_path, 'rb') as f:
                entries = self._parse_stream(dispatcher, f, args.encoding, hint)

        if args.json:
            json.dump([entry.to_dict() for entry in entries], self.stdout, ensure_ascii=False, indent=2)
            self.stdout.write('\n')
        else:
            self._print_entries(entries)
        return 0

    def _parse_stream(self, dispatcher: SubtitleDispatcher, stream, encoding: str, hint):
        if encoding.lower() == AUTO_ENCODING:
            stream = ensure_seekable(stream)
            encoding = EncodingDetector.detect_stream_encoding(stream)
            logger.info(f"Detected encoding: {encoding}")

        logger.info(f"Parsing with hint {hint.name} and encoding {encoding}")
        return dispatcher.parse(stream, encoding, hint)

    def _print_entries(self, entries: List[SubtitleEntry]) -> None:
        for position, entry in enumerate(entries, start=1):
            index = entry.index if entry.index is not None else position
            self.stdout.write(f"{index}\n{entry.format_time_range('srt')}\n")
            for line in entry.lines:
                self.stdout.write(f"{line}\n")
            self.stdout.write('\n')

    def _handle_detect(self, args) -> int:
        """Handle detect command."""
        for name in args.names:
            subtitle_format = self.dispatcher.detect_format(name)
            self.stdout.write(f"{name}: {subtitle_format.name}\n")
        return 0

    def _handle_formats(self, args) -> int:
        """Handle formats command."""
        default = self.dispatcher.registry.default_format
        for subtitle_format in self.dispatcher.registry.list_formats():
            marker = ' (default)' if subtitle_format == default else ''
            self.stdout.write(f"{subtitle_format.name}\t{subtitle_format.extension}{marker}\n")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    cli = CLIHandler()
    parser = cli.create_parser()
    args = parser.parse_args(argv)
    return cli.handle_command(args)


if __name__ == '__main__':
    sys.exit(main())
