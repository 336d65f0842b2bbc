import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from .api_client import ApiClient, ApiError
from .local_cache import LocalCache
from .sync_service import SyncRole, SyncService

logger = logging.getLogger('parkmaster.client')


def _confirm(question):
    answer = input(f"{question} [y/N] ")
    return answer.strip().lower() in ('y', 'yes')


def build_parser():
    parser = argparse.ArgumentParser(prog='parkmaster.client',
                                     description='Synchronise a local Park Master cache with the server.')
    parser.add_argument('--api-url', help='Server API base URL (default: $PARKMASTER_API_URL)')
    parser.add_argument('--cache', help='Local cache file (default: $PARKMASTER_CACHE)')
    sub = parser.add_subparsers(dest='command', required=True)

    run = sub.add_parser('run', help='Run the sync loop in the configured role')
    run.add_argument('--role', choices=[r.value for r in SyncRole],
                     help='Enable this role first (asks for confirmation)')

    sub.add_parser('push', help='Overwrite server state with the local cache once')
    sub.add_parser('pull', help='Overwrite the local cache with server state once')

    enable = sub.add_parser('enable', help='Set the sync role (asks for confirmation)')
    enable.add_argument('role', choices=[SyncRole.PUSH.value, SyncRole.PULL.value])

    sub.add_parser('disable', help='Stop scheduling syncs')
    sub.add_parser('status', help='Show the configured role and cache contents')
    return parser


def main(argv=None):
    load_dotenv()
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    args = build_parser().parse_args(argv)

    cache = LocalCache(args.cache)
    service = SyncService(ApiClient(args.api_url), cache)

    try:
        if args.command == 'push':
            service.push_now()
        elif args.command == 'pull':
            service.pull_now()
        elif args.command == 'enable':
            if not service.enable(args.role, _confirm, input):
                print('Confirmation failed, role unchanged.')
                return 1
        elif args.command == 'disable':
            service.disable()
        elif args.command == 'status':
            print(f"role: {service.role.value}")
            print(f"vehicles: {len(cache.vehicles)}  parked: {sum(1 for v in cache.vehicles if not v.get('exitTime'))}")
            print(f"permanent clients: {len(cache.permanent_clients)}")
        elif args.command == 'run':
            if args.role and not service.enable(args.role, _confirm, input):
                print('Confirmation failed, role unchanged.')
                return 1
            if service.role is SyncRole.DISABLED:
                print('Sync is disabled; enable push or pull first.')
                return 1
            logger.info("Running %s loop every %s seconds", service.role.value, service.interval)
            service.run()
    except ApiError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
