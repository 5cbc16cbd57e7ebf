"""Entry point: python cli.py scan-pull-request [--config PATH]"""
import argparse
import sys

from utils.config import load_repo_config
from utils.errors import FrogbotError, SecurityIssuesFoundError
from utils.pr_processor import scan_pull_request
from vcs.factory import get_vcs_client

EXIT_SUCCESS = 0
EXIT_SECURITY_ISSUES = 1
EXIT_FAILURE = 2


def run_scan_pull_request(args) -> int:
    try:
        repo_config = load_repo_config(args.config)
        client = get_vcs_client(repo_config.git)
        rows = scan_pull_request(repo_config, client, head_dir=args.working_tree)
    except SecurityIssuesFoundError as e:
        print(f"🚨 {e}", file=sys.stderr)
        return EXIT_SECURITY_ISSUES
    except FrogbotError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"✅ Pull request scan finished, {len(rows)} new issue(s) found")
    return EXIT_SUCCESS


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="frogbot", description="Scan pull requests for newly added vulnerable dependencies")
    subparsers = parser.add_subparsers(dest="command", required=True)

    spr = subparsers.add_parser(
        "scan-pull-request",
        aliases=["spr"],
        help="Scan the pull request and comment with the new issues it introduces",
    )
    spr.add_argument("--config", help="Path to frogbot-config.yml (default: .frogbot/frogbot-config.yml if present)")
    spr.add_argument("--working-tree", default=".", help="Checked out pull request head (default: current directory)")
    spr.set_defaults(func=run_scan_pull_request)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
