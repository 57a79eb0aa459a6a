"""Entry point: play audio files from the command line."""

import argparse
import logging
import sys

from mp3_player import PlaybackCoordinator, PlayerError, log_config
from mp3_player.log_config import setup_logging
from mp3_player.settings import PlayerSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Play MP3 (and other audio) files in order.')
    parser.add_argument('files', nargs='+', help='audio files, played in the given order')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--once', action='store_true', help='play every file once')
    mode.add_argument('--loop', action='store_true', help='loop over all files until Ctrl+C')
    parser.add_argument('--settings', default='', help='settings directory (default ~/.mp3_player)')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug output on stderr')
    return parser


def run(args: argparse.Namespace, decoder_factory=None) -> int:
    """Play according to parsed args. Returns the process exit code."""
    log = logging.getLogger("mp3_player.main")
    if decoder_factory is None:
        decoder_factory = PlayerSettings(args.settings).decoder_factory()
    with PlaybackCoordinator(args.files, decoder_factory=decoder_factory) as player:
        try:
            if args.loop:
                results = player.loop_all()
            elif args.once:
                results = player.play_all_once()
            else:
                results = player.play_next().result()
        except KeyboardInterrupt:
            log.info("Interrupted")
            player.stop()
            return 130
    failed = [r for r in results if r.error is not None]
    for r in failed:
        log.error("%s", r.error)
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    log = logging.getLogger("mp3_player.main")
    try:
        return run(args)
    except PlayerError as e:
        log.error("Playback error: %s", e)
        log.debug("Playback error details", exc_info=True)
        if log_config.LOG_FILE_PATH:
            log.info("Details in %s", log_config.LOG_FILE_PATH)
        return 1


if __name__ == '__main__':
    sys.exit(main())
