"""scopecap -- Dump an oscilloscope capture file as JSON."""

import sys

import scopecap
from scopecap.cli._common import (
    EXIT_DECODE_ERROR,
    EXIT_OK,
    EXIT_USAGE_ERROR,
    OutputMode,
    assemble_output,
    base_parser,
    setup_logging,
    to_json,
)
from scopecap.errors import CaptureError, UnsupportedOutputMode


def main() -> int:
    parser = base_parser("Decode an oscilloscope capture file to JSON")
    parser.add_argument("mode", metavar="MODE", help="output mode: raw or parsed")
    parser.add_argument("file", metavar="FILE", help="capture file to decode")
    parser.add_argument(
        "--legacy-channel2",
        action="store_true",
        help="build channel 2 points from channel 1's trace, as older releases did",
    )
    parser.add_argument("--indent", type=int, default=None, help="pretty-print JSON with this indent")
    args = parser.parse_args()
    setup_logging(args.verbose)

    # Mode is checked before the file is touched
    try:
        mode = OutputMode.parse(args.mode)
    except UnsupportedOutputMode as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        profile = scopecap.get_profile(args.profile) if args.profile else scopecap.default_profile()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        capture = scopecap.load(args.file, profile)
        document = assemble_output(capture, mode, profile, legacy_channel2_points=args.legacy_channel2)
        output = to_json(document, indent=args.indent)
    except KeyboardInterrupt:
        return 130
    except CaptureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DECODE_ERROR

    print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
