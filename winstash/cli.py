"""Command-line interface for winstash."""

import argparse
import json
import logging
import signal
import sys
from pathlib import Path

from winstash import __version__, __app_name__, DISPLAY_VERSION
from winstash.core import (
    CaptureRestoreEngine, ProcessContext, read_saved_layouts, watch_displays,
)
from winstash.persist import DurableStateFile, get_cache_dir
from winstash.platforms import get_platform
from winstash.store import split_signature

DEFAULT_INSTANCE = 'winstash'
DEFAULT_INTERVAL = 30.0


def build_parser():
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Remember window positions per display layout and put them back.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s --save                          Save the current window layout
  %(prog)s --restore                       Put windows back where they were saved
  %(prog)s --list -v                       Show saved layouts with every window
  %(prog)s --watch --interval 10           Track layouts, restore on display change
  %(prog)s --save -xp "obs*.exe"           Save, ignoring matching processes
  %(prog)s --list --json                   Saved layouts as JSON

layouts are keyed by the size of the whole desktop, so a laptop alone and
the same laptop docked to two monitors each keep their own layout.
windows are matched by handle: a saved layout applies to windows that are
still open, not to windows reopened after a reboot.""",
    )
    parser.add_argument(
        '--version', action='version',
        version=f'{__app_name__} {DISPLAY_VERSION} ({__version__})'
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--save', '-s', action='store_true',
        help='Save the position of every window for the current display layout'
    )
    mode.add_argument(
        '--restore', '-r', action='store_true',
        help='Restore saved positions for the current display layout'
    )
    mode.add_argument(
        '--list', '-l', dest='list_only', action='store_true',
        help='List saved layouts (default when no mode is given)'
    )
    mode.add_argument(
        '--watch', '-w', action='store_true',
        help='Run until interrupted: save periodically, restore when the display changes'
    )
    mode.add_argument(
        '--forget', action='store_true',
        help='Delete the saved state file'
    )
    parser.add_argument(
        '--interval', '-i', type=float, default=DEFAULT_INTERVAL, metavar='SECONDS',
        help=f'Seconds between checks in --watch mode (default: {DEFAULT_INTERVAL:g})'
    )
    parser.add_argument(
        '--instance', type=str, default=DEFAULT_INSTANCE, metavar='NAME',
        help=f'Name of the state subdirectory (default: {DEFAULT_INSTANCE})'
    )
    parser.add_argument(
        '--cache-dir', type=str, default=None, metavar='PATH',
        help='Base directory for state (default: per-user cache directory)'
    )
    parser.add_argument(
        '--exclude-process', '-xp', action='append', default=[],
        metavar='NAME',
        help='Ignore windows by process name (repeatable, fnmatch pattern). '
             'E.g.: -xp notepad.exe -xp "chrome*"'
    )
    parser.add_argument(
        '--exclude-file', '-xf', type=str, default=None, metavar='PATH',
        help='File containing process names to ignore, one per line'
    )
    parser.add_argument(
        '--json', dest='json_output', action='store_true',
        help='Output results as JSON'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Verbose logging output'
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.interval <= 0:
        parser.error('--interval must be positive')

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
    )

    exclude_processes = list(args.exclude_process)
    if args.exclude_file:
        exclude_processes.extend(_read_pattern_file(args.exclude_file))

    cache_dir = Path(args.cache_dir) if args.cache_dir else get_cache_dir()
    state_file = DurableStateFile.open(cache_dir, args.instance)

    if args.forget:
        if state_file.remove():
            print(f"Removed {state_file.path}")
        elif state_file.path.exists():
            sys.exit(1)
        else:
            print(f"No saved state at {state_file.path}")
        return

    if not (args.save or args.restore or args.watch):
        store, problem = read_saved_layouts(state_file)
        if args.json_output:
            _print_layouts_json(store)
        else:
            _print_layouts(store, state_file.path, problem, args.verbose)
        return

    try:
        platform = get_platform(exclude_processes=exclude_processes)
        platform.setup()
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.watch:
        _install_sigterm_handler()
        engine = CaptureRestoreEngine(platform, state_file)
        try:
            watch_displays(engine, platform, args.interval)
        except KeyboardInterrupt:
            pass
        _print_summary(engine, 'watch', args.json_output)
        return

    # A one-shot command runs in a fresh process, so it trusts the state file
    # on disk instead of starting from an empty store.
    engine = CaptureRestoreEngine(platform, state_file,
                                  context=ProcessContext(state_saved=True))
    if args.save:
        engine.capture_all('Save')
        mode = 'save'
    else:
        engine.restore_all('Restore')
        mode = 'restore'
    engine.teardown()
    _print_summary(engine, mode, args.json_output)


def _read_pattern_file(path):
    patterns = []
    try:
        with open(path, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    patterns.append(line)
    except FileNotFoundError:
        print(f"Warning: exclude file not found: {path}", file=sys.stderr)
    return patterns


def _install_sigterm_handler():
    def _on_sigterm(signum, frame):
        raise KeyboardInterrupt
    try:
        signal.signal(signal.SIGTERM, _on_sigterm)
    except (ValueError, OSError):
        # Not in the main thread
        pass


def _print_summary(engine, mode, json_output):
    stats = engine.stats.as_dict()
    if json_output:
        print(json.dumps({'mode': mode, 'stats': stats}, indent=2))
        return
    if mode == 'save':
        print(f"\n  Saved {stats['windows_saved']} window(s)")
    elif mode == 'restore':
        print(f"\n  Restored {stats['windows_restored']} window(s), "
              f"{stats['windows_moved']} moved, "
              f"{stats['windows_not_found']} not in saved layout")
    else:
        print(f"\n  {stats['captures']} save(s), {stats['restores']} restore(s)")
    if stats['save_failures']:
        print(f"  Warning: {stats['save_failures']} save(s) to disk failed")
    print()


def _safe_str(s):
    """Encode string safely for console output, replacing unencodable chars."""
    try:
        s.encode(sys.stdout.encoding or 'utf-8')
        return s
    except (UnicodeEncodeError, LookupError):
        return s.encode('ascii', errors='replace').decode('ascii')


def _layouts_as_data(store):
    data = []
    for signature, windows in store.items():
        width, height = split_signature(signature)
        data.append({
            'signature': signature,
            'display': {'w': width, 'h': height},
            'windows': [
                {
                    'id': snap.window_id,
                    'title': snap.title,
                    'position': {'x': snap.x, 'y': snap.y,
                                 'w': snap.width, 'h': snap.height},
                    'maximized': snap.maximized.name,
                    'minimized': snap.minimized,
                    'fullscreen': snap.fullscreen,
                }
                for _, snap in sorted(windows.items())
            ],
        })
    return data


def _print_layouts_json(store):
    print(json.dumps(_layouts_as_data(store), indent=2))


def _print_layouts(store, path, problem, verbose):
    if problem:
        print(f"No saved layouts ({problem}).")
        return
    if not len(store):
        print(f"No saved layouts in {path}.")
        return

    print(f"\n  SAVED LAYOUTS: {len(store)} display size(s) in {path}\n")
    for signature, windows in store.items():
        width, height = split_signature(signature)
        print(f"  {width}x{height}: {len(windows)} window(s)")
        if not verbose:
            continue
        for _, snap in sorted(windows.items()):
            flags = [name for name, on in (
                ('max', bool(snap.maximized)),
                ('min', snap.minimized),
                ('full', snap.fullscreen)) if on]
            pos = f"({snap.x},{snap.y}) {snap.width}x{snap.height}"
            title = _safe_str(snap.title[:50]) if snap.title else '<untitled>'
            print(f"    {snap.window_id:>10}  {pos:<24}  "
                  f"{','.join(flags) or '-':<12}  {title}")
    print()
