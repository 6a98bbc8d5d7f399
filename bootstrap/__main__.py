# kindling/bootstrap/__main__.py
import argparse
import json
import logging
import os
import sys

from bootstrap.exceptions import CoreError, VersionError

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='python -m bootstrap', description='Kindling bootstrap tools')
    parser.add_argument('--version', action='store_true', help='print the Kindling version and exit')
    parser.add_argument('--env', default=None, help='configuration environment to load')
    parser.add_argument('--log-level', default=None, help='override the configured log level')
    sub = parser.add_subparsers(dest='command')

    paths = sub.add_parser('paths', help='print the resolved directory set')
    paths.add_argument('--install-root', default=os.getcwd(), help='framework install root (default: cwd)')
    paths.add_argument('--host-version', default=None, help='host version used for the autoloads file name')

    check = sub.add_parser('check-version', help='check a host version against the minimum')
    check.add_argument('current', help='host version, e.g. 27.1')
    check.add_argument('--minimum', default=None, help='required version (default: from settings)')
    return parser


def _cmd_paths(args, settings) -> int:
    from configs.path_resolver import PathResolver

    resolver = PathResolver(
        args.install_root,
        app_name=settings.app_name,
        env_prefix=settings.env_prefix,
        host_version=args.host_version or settings.minimum_host_version,
        init_file_extension=settings.init_file_extension,
    )
    directories = resolver.resolve(os.environ)
    print(json.dumps(directories.as_dict(), indent=2))
    return 0


def _cmd_check_version(args, settings) -> int:
    from bootstrap.version_guard import VersionGuard

    guard = VersionGuard(
        app_name=settings.app_name,
        binary_path=sys.executable,
        install_docs=settings.install_docs,
        sync_command=settings.sync_command,
        env_prefix=settings.env_prefix,
    )
    minimum = args.minimum or settings.minimum_host_version
    guard.check(args.current, minimum)
    print(f'✓ Host {args.current} satisfies minimum {minimum}')
    return 0


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)

    if args.version:
        from . import __version__
        print(f'Kindling Bootstrap {__version__}')
        return 0

    if args.command is None:
        _build_parser().print_usage()
        return 1

    from configs.config_loader import ConfigLoader

    try:
        settings = ConfigLoader().load_settings(env=args.env)
        _configure_logging(args.log_level or settings.log_level)
        if args.command == 'paths':
            return _cmd_paths(args, settings)
        return _cmd_check_version(args, settings)
    except VersionError as e:
        print(f'✗ {e}', file=sys.stderr)
        return 2
    except CoreError as e:
        logger.error(f'{args.command} failed: {e.message}')
        print(f'✗ {e}', file=sys.stderr)
        return 2 if e.fatal else 1


if __name__ == '__main__':
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print('\nInterrupted by user.')
        sys.exit(130)
