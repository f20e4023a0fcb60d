"""
Command-line interface for snapshot maintenance.

Snapshots are normally written by test runs; this CLI inspects and edits them
directly: list them, diff a candidate file against one, accept a file as the
new snapshot, or delete one.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import configure_logging
from .comparator import Comparator
from .config import ConfigManager, context_lines, diffable, ignore_regex, snap_directory, snap_extension
from .exceptions import SnapshotNotFoundError
from .storage import SnapshotStore

logger = logging.getLogger(__name__)


class SnapshotCLI:
    """Command-line interface for snapshot maintenance."""

    def __init__(self):
        self.config_manager: Optional[ConfigManager] = None
        self.config = None
        self.verbose = False

    def run(self, args: Optional[list[str]] = None) -> int:
        """Run the CLI with given arguments."""
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        if not getattr(parsed_args, "func", None):
            parser.print_help()
            return 1

        self.verbose = parsed_args.verbose
        if parsed_args.verbose:
            configure_logging(logging.DEBUG)
        elif parsed_args.quiet:
            configure_logging(logging.WARNING)

        try:
            self.config_manager = ConfigManager(parsed_args.config)
            self._apply_global_options(parsed_args)
            self.config = self.config_manager.get_config()
            return parsed_args.func(parsed_args)
        except KeyboardInterrupt:
            logger.info("\nInterrupted by user")
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if self.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="snapdiff",
            description="Inspect and maintain snapshot files",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument("--config", "-c", type=Path, help="Configuration file path")
        parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
        parser.add_argument("--quiet", "-q", action="store_true", help="Quiet output")
        parser.add_argument("--snapshot-dir", type=Path, help="Directory containing snapshots")
        parser.add_argument("--extension", help="Snapshot file extension (default: .snap)")

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        # List command
        list_parser = subparsers.add_parser("list", help="List stored snapshots")
        list_parser.set_defaults(func=self._list_command)

        # Show command
        show_parser = subparsers.add_parser("show", help="Print a stored snapshot")
        show_parser.add_argument("name", help="Test name the snapshot belongs to")
        show_parser.set_defaults(func=self._show_command)

        # Diff command
        diff_parser = subparsers.add_parser("diff", help="Diff a file against a stored snapshot")
        diff_parser.add_argument("name", help="Test name the snapshot belongs to")
        diff_parser.add_argument("file", type=Path, help="File holding the received output")
        diff_parser.add_argument("--context", type=int, help="Lines of context around changes")
        diff_parser.add_argument("--ignore", help="Regex; a diff matching it counts as a match")
        diff_parser.add_argument(
            "--undiffable", action="store_true", help="Treat contents as binary and skip the diff"
        )
        diff_parser.set_defaults(func=self._diff_command)

        # Update command
        update_parser = subparsers.add_parser("update", help="Store a file as the snapshot")
        update_parser.add_argument("name", help="Test name the snapshot belongs to")
        update_parser.add_argument("file", type=Path, help="File holding the new snapshot contents")
        update_parser.set_defaults(func=self._update_command)

        # Delete command
        delete_parser = subparsers.add_parser("delete", help="Delete a stored snapshot")
        delete_parser.add_argument("name", help="Test name the snapshot belongs to")
        delete_parser.set_defaults(func=self._delete_command)

        # Config command
        config_parser = subparsers.add_parser("config", help="Configuration management")
        config_parser.add_argument(
            "--init", action="store_true", help="Initialize default configuration file"
        )
        config_parser.add_argument("--show", action="store_true", help="Show current configuration")
        config_parser.set_defaults(func=self._config_command)

        return parser

    def _apply_global_options(self, args) -> None:
        options = []
        if args.snapshot_dir:
            options.append(snap_directory(args.snapshot_dir))
        if args.extension:
            options.append(snap_extension(args.extension))
        if getattr(args, "context", None) is not None:
            options.append(context_lines(args.context))
        if getattr(args, "ignore", None):
            options.append(ignore_regex(args.ignore))
        if getattr(args, "undiffable", False):
            options.append(diffable(False))
        self.config_manager.update_config(*options)

    def _store(self) -> SnapshotStore:
        return SnapshotStore(self.config.directory, self.config.extension)

    def _list_command(self, args) -> int:
        """Handle the list command."""
        store = self._store()
        if not store.directory_exists():
            logger.info(f"Snapshot directory {store.directory} does not exist")
            return 0

        stats = store.get_stats()
        logger.info(f"Found {stats['total_snapshots']} snapshots in {store.directory}:")
        for path in store.list_snapshots():
            logger.info(f"  {path.name} ({path.stat().st_size} bytes)")
        logger.info(f"Total size: {stats['total_size_bytes'] / 1024:.2f} KB")
        return 0

    def _show_command(self, args) -> int:
        """Handle the show command."""
        data = self._store().read(args.name)
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
        return 0

    def _diff_command(self, args) -> int:
        """Handle the diff command."""
        store = self._store()
        try:
            expected = store.read(args.name)
        except SnapshotNotFoundError as e:
            logger.error(str(e))
            return 1

        actual = args.file.read_bytes()
        result = Comparator(self.config).compare(expected, actual)

        if result.ignored:
            logger.info(f"Snapshot {store.path_for(args.name).name} differs only by ignored changes")
            return 0
        if result.match:
            logger.info(f"Snapshot {store.path_for(args.name).name} matches {args.file}")
            return 0

        if result.diff is None:
            logger.error(f"Snapshot {store.path_for(args.name).name} differs ({result.error_message})")
        else:
            sys.stdout.write(result.diff)
            sys.stdout.flush()
        return 1

    def _update_command(self, args) -> int:
        """Handle the update command."""
        store = self._store()
        if not store.directory_exists():
            store.create_directory()
        path = store.write(args.name, args.file.read_bytes())
        logger.info(f"Updated snapshot {path}")
        return 0

    def _delete_command(self, args) -> int:
        """Handle the delete command."""
        store = self._store()
        if store.delete(args.name):
            return 0
        logger.warning(f"No snapshot for {args.name} at {store.path_for(args.name)}")
        return 1

    def _config_command(self, args) -> int:
        """Handle the config command."""
        if args.init:
            self.config_manager.create_default_config()
            return 0

        if args.show:
            logger.info("Current configuration:")
            for key, value in self.config.to_dict().items():
                logger.info(f"  {key}: {value}")
            return 0

        logger.info("Use --init to create default config or --show to display current config")
        return 0


def main():
    """Main entry point for the CLI."""
    cli = SnapshotCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
