"""Command-line host for toonsettings.

Usage:
    python copy_settings.py                                  # Every profile under the EVE root
    python copy_settings.py PROFILE_DIR                      # One profile
    python copy_settings.py PROFILE_DIR --from 2112625428 --all
    python copy_settings.py PROFILE_DIR --from 2112625428 --to 90000001 90000002
    python copy_settings.py --profiles                       # List profiles under the EVE root
"""

from __future__ import annotations

import argparse
import sys

from toonsettings import (
    GAME_CLIENT_ADVISORY,
    CharacterId,
    CopyRequest,
    DirectoryUnavailable,
    SettingsManager,
    SourceUnreadable,
    summarize,
)
from toonsettings.logging_config import setup_logging


def list_profiles(manager: SettingsManager) -> int:
    for profile, files in manager.scan_profiles().items():
        print(f"{profile}  ({len(files)} characters)")
    return 0


def list_characters(manager: SettingsManager, files) -> None:
    labels = manager.resolve_all({f.id for f in files})
    for f in files:
        print(f"  {f.id.value:>12}  {labels[f.id]:<32} {f.size:>8} bytes  {f.path.parent.name}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="copy-settings",
        description="Copy one EVE character's settings onto other characters",
    )
    parser.add_argument("directory", nargs="?", help="Profile directory (default: all profiles)")
    parser.add_argument("--profiles", action="store_true", help="List settings profiles")
    parser.add_argument("--from", dest="source", type=int, help="Source character id")
    parser.add_argument("--to", nargs="+", type=int, default=[], help="Destination ids")
    parser.add_argument("--all", action="store_true", help="Copy to every other character")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    with SettingsManager() as manager:
        if args.profiles:
            return list_profiles(manager)

        try:
            files = manager.scan(args.directory)
        except DirectoryUnavailable as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        print(f"\n{len(files)} character settings file(s) found")
        list_characters(manager, files)

        if args.source is None:
            return 0

        source_id = CharacterId(args.source)
        candidates = [f for f in files if f.id == source_id]
        if not candidates:
            print(f"Error: no settings file for character {args.source}", file=sys.stderr)
            return 2
        if len(candidates) > 1:
            print(
                f"Error: character {args.source} has settings in {len(candidates)} profiles; "
                "pass the profile directory to pick one",
                file=sys.stderr,
            )
            return 2
        source = candidates[0]

        if args.all:
            destinations = [f for f in files if f.id != source.id]
        else:
            wanted = {CharacterId(i) for i in args.to}
            found = {f.id for f in files}
            missing = [i for i in args.to if CharacterId(i) not in found]
            if missing:
                print(f"Error: no settings file for {missing}", file=sys.stderr)
                return 2
            destinations = [f for f in files if f.id in wanted]

        if not destinations:
            print("Nothing to copy: choose --to ids or --all", file=sys.stderr)
            return 2

        print(f"\n{GAME_CLIENT_ADVISORY}")
        if not args.yes:
            source_label = manager.label_for(source.id)
            answer = input(f"Copy {source_label} to {len(destinations)} character(s)? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                print("Aborted")
                return 1

        try:
            outcomes = manager.copy(CopyRequest(source=source, destinations=destinations))
        except SourceUnreadable as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        summary = summarize(outcomes)
        print(summary.message)
        return 0 if summary.all_succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
