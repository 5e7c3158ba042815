#!/usr/bin/env python3
"""
Upsert Route 53 A records for the services of ECS clusters.

For every service of every cluster given, one A record named
<prefix><service><suffix>.<zone> is upserted, pointing at the private IPv4
addresses of the service's running containers.

Exit codes:
  0 - All clusters reconciled
  1 - Usage error, or one or more clusters failed
"""

import argparse
import os
import sys

from botocore.exceptions import BotoCoreError
from tabulate import tabulate

from ecs_service_discovery.changes import DEFAULT_TTL
from ecs_service_discovery.errors import UsageError
from ecs_service_discovery.logging import configure_logging
from ecs_service_discovery.naming import NameResolver
from ecs_service_discovery.reconcile import ClusterResult, ReconcileOptions, reconcile
from ecs_service_discovery.utils.aws import make_clients
from ecs_service_discovery.utils.config import (
    DEFAULT_CONFIG_FILE,
    format_missing_credentials_error,
    is_credentials_error,
    load_config,
)


EPILOG = """\
If no Route 53 zone is specified using -z, the cluster name is being used.

Requires AWS credentials with the following permissions:
  ecs:ListServices
  ecs:ListTasks
  ecs:DescribeTasks
  route53:ListHostedZones
  route53:ChangeResourceRecordSets
  route53:GetChange
"""


class ArgumentParser(argparse.ArgumentParser):
    """argparse with the 'fatal error' format and exit code 1 on usage errors"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"fatal error: {message}\n")

    def parse_known_args(self, args=None, namespace=None):
        if args is None:
            args = sys.argv[1:]
        return super().parse_known_args(self.join_option_values(args), namespace)

    def join_option_values(self, args: list[str]) -> list[str]:
        """
        Attach dash-led values to the option before them.

        ["-s", "-service"] becomes ["-s-service"] and ["--suffix", "-service"]
        becomes ["--suffix=-service"], so argparse does not take the value
        for another option.
        """
        takes_value = {
            option
            for action in self._actions
            if action.nargs is None
            for option in action.option_strings
        }

        joined = []
        args = list(args)
        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--":
                joined.extend(args[i:])
                break
            value = args[i + 1] if i + 1 < len(args) else None
            if arg in takes_value and value and value.startswith("-"):
                sep = "=" if arg.startswith("--") else ""
                joined.append(f"{arg}{sep}{value}")
                i += 2
                continue
            joined.append(arg)
            i += 1
        return joined


def build_parser() -> argparse.ArgumentParser:
    p = ArgumentParser(
        prog="ecs-service-discovery",
        description="ECS Service Discovery for Amazon Web Services",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("clusters", nargs="*", metavar="cluster", help="ECS cluster(s)")
    p.add_argument(
        "-d", "--dry-run", action="store_true", default=None,
        help="Perform a dry-run without making any changes",
    )
    p.add_argument("-f", "--filter", help="Filter service names using a regex")
    p.add_argument("-p", "--prefix", help="Prefix to put in front of the service name")
    p.add_argument("-s", "--suffix", help="Suffix to append to the service name")
    p.add_argument(
        "-t", "--ttl", type=int,
        help=f"TTL in seconds for the A records (default: {DEFAULT_TTL})",
    )
    p.add_argument(
        "-w", "--no-wait", action="store_true", default=None,
        help="Do NOT wait for the change batch to be synced",
    )
    p.add_argument("-z", "--zone", help="Route 53 zone to update")
    p.add_argument(
        "-j", "--jobs", type=int,
        help="Number of services discovered in parallel (default: 1)",
    )
    p.add_argument(
        "--dedupe", action="store_true", default=None,
        help="Drop repeated IP addresses within a record",
    )
    p.add_argument(
        "--fail-fast", action="store_true", default=None,
        help="Stop at the first cluster that fails",
    )
    p.add_argument("--region", help="AWS region")
    p.add_argument("--profile", help="AWS profile")
    p.add_argument("--api-timeout", type=float, help="AWS API call timeout in seconds")
    p.add_argument("--wait-delay", type=int, help="Seconds between sync status polls")
    p.add_argument("--wait-max-attempts", type=int, help="Maximum sync status polls")
    p.add_argument(
        "--config",
        help=f"Config file with option defaults (default: {DEFAULT_CONFIG_FILE})",
    )
    p.add_argument("--logging-config", help="Logging config file")
    return p


def build_options(args: argparse.Namespace, cfg: dict) -> ReconcileOptions:
    """
    Merge command-line arguments over config file values.

    Raises:
        UsageError: out-of-range values
    """

    def pick(name, default=None):
        value = getattr(args, name, None)
        if value is not None:
            return value
        return cfg.get(name, default)

    wait = False if args.no_wait else cfg.get("wait", True)

    options = ReconcileOptions(
        dry_run=bool(pick("dry_run", False)),
        filter=pick("filter"),
        prefix=pick("prefix", ""),
        suffix=pick("suffix", ""),
        ttl=pick("ttl", DEFAULT_TTL),
        wait=bool(wait),
        zone=pick("zone"),
        dedupe=bool(pick("dedupe", False)),
        fail_fast=bool(pick("fail_fast", False)),
        jobs=pick("jobs", 1),
        wait_delay=pick("wait_delay"),
        wait_max_attempts=pick("wait_max_attempts"),
        profile=pick("profile"),
    )

    if options.ttl < 0:
        raise UsageError(f"invalid ttl ('{options.ttl}')")
    if options.jobs < 1:
        raise UsageError(f"invalid jobs ('{options.jobs}')")
    if options.wait_delay is not None and options.wait_delay < 1:
        raise UsageError(f"invalid wait delay ('{options.wait_delay}')")
    if options.wait_max_attempts is not None and options.wait_max_attempts < 1:
        raise UsageError(f"invalid wait max attempts ('{options.wait_max_attempts}')")

    api_timeout = pick("api_timeout")
    if api_timeout is not None and api_timeout <= 0:
        raise UsageError(f"invalid api timeout ('{api_timeout}')")

    return options


def format_summary(results: list[ClusterResult]) -> str:
    rows = []
    for r in results:
        change_id = r.submission.change_id if r.submission else None
        rows.append(
            [r.cluster, r.zone, r.zone_id or "-", r.changes, change_id or "-", r.status]
        )
    return tabulate(
        rows,
        headers=["Cluster", "Zone", "Zone ID", "Records", "Change", "Status"],
        tablefmt="simple",
    )


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if not args.clusters:
        print("fatal error: no ecs cluster", file=sys.stderr)
        return 1

    # verbosity flags
    debug = os.environ.get("DEBUG")
    quiet = os.environ.get("QUIET", "1")

    try:
        configure_logging(args.logging_config, debug=bool(debug), quiet=bool(quiet))

        if args.config and not os.path.exists(args.config):
            raise UsageError(f"config file not found ('{args.config}')")
        cfg = load_config(args.config or DEFAULT_CONFIG_FILE)

        options = build_options(args, cfg)
        resolver = NameResolver(options.filter, options.prefix, options.suffix)
    except UsageError as e:
        print(f"fatal error: {e}", file=sys.stderr)
        return 1

    api_timeout = args.api_timeout
    if api_timeout is None:
        api_timeout = cfg.get("api_timeout")

    try:
        ecs, route53 = make_clients(
            region=args.region or cfg.get("region"),
            profile=options.profile,
            api_timeout=api_timeout,
        )
    except BotoCoreError as e:
        print(f"fatal error: unable to create AWS clients ({e})", file=sys.stderr)
        if is_credentials_error(str(e)):
            print(format_missing_credentials_error(options.profile), file=sys.stderr)
        return 1

    results = reconcile(args.clusters, ecs, route53, options, resolver=resolver)

    print()
    print(format_summary(results))

    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
