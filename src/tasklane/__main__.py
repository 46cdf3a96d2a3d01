"""Entry point for tasklane CLI."""

import sys
from pathlib import Path

NOUNS = {"lane", "item"}


def main():
    # No subcommand or non-noun argument = TUI mode
    if len(sys.argv) < 2 or (sys.argv[1] not in NOUNS and not sys.argv[1].startswith("-")):
        from tasklane.ui import TasklaneApp

        paths = [Path(p).resolve() for p in sys.argv[1:] if not p.startswith("-")]
        if not paths:
            print("usage: tasklane FILE [FILE ...] | tasklane {lane,item} ...", file=sys.stderr)
            sys.exit(2)
        app = TasklaneApp(paths)
        app.run()
        return

    # Global --help before noun
    if sys.argv[1] in ("-h", "--help"):
        from tasklane.cli import build_parser

        build_parser().parse_args()
        return

    from tasklane.cli import build_parser
    from tasklane.cli._common import configure_logging

    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    configure_logging(args.verbose)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
