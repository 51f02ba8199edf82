from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping

from git_fanout.adapters.actions import CommandAction
from git_fanout.adapters.credentials import NoCredentials, SshKeyCredentials, UsernamePasswordCredentials
from git_fanout.adapters.status import ConsoleStatusSink
from git_fanout.application.run_configuration import RunConfiguration
from git_fanout.application.use_cases.repository_fanout import RepositoryFanout
from git_fanout.cli.config import AppConfig, load_config
from git_fanout.cli.selector_expression import parse_selector_expression
from git_fanout.domain.actions import ActionSequence, RepositoryAction
from git_fanout.domain.entities import RunOutcome
from git_fanout.domain.errors import RunError
from git_fanout.domain.ports import GitCredentials
from git_fanout.logging_utils import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-fanout",
        description="Clone a set of git repositories and run a command in each of them.",
    )

    parser.add_argument(
        "-d",
        "--dir",
        dest="working_dir",
        required=False,
        help="Working directory holding the cloned repositories. Falls back to GIT_FANOUT_DIR.",
    )
    parser.add_argument(
        "-s",
        "--selector",
        required=False,
        help=(
            "Repository selector expression, e.g. 'org-repo-prefix:my-org/service-', "
            "'file:repos.txt', 'list:url1,url2' or 'stdin'. Falls back to GIT_FANOUT_SELECTOR."
        ),
    )
    parser.add_argument(
        "-a",
        "--action",
        action="append",
        required=False,
        help="Command to run in each repository; repeat to chain commands. Falls back to GIT_FANOUT_ACTION.",
    )
    parser.add_argument(
        "-f",
        "--finalization-action",
        required=False,
        help=(
            "Command to run in each repository after the action ran for all of them. "
            "Falls back to GIT_FANOUT_FINALIZATION_ACTION."
        ),
    )
    parser.add_argument(
        "-t",
        "--access-token",
        required=False,
        help="Access token for the hosting API and HTTPS clones. Falls back to GIT_FANOUT_ACCESS_TOKEN.",
    )
    parser.add_argument(
        "--ssh-key",
        required=False,
        help="Private key used to clone SSH remotes. Falls back to GIT_FANOUT_SSH_KEY.",
    )
    parser.add_argument(
        "--insecure-ssh",
        action="store_true",
        help="Disable SSH host key verification (accepts any host key).",
    )
    parser.add_argument(
        "--strict-fail",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Abort on the first error (default). Falls back to GIT_FANOUT_STRICT_FAIL.",
    )
    parser.add_argument(
        "--cleanup",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove all cloned repositories when done. Falls back to GIT_FANOUT_CLEANUP.",
    )
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Refuse to run when the working directory is not empty instead of clearing it.",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "plain"],
        required=False,
        help="Log output format. Falls back to LOG_FORMAT.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args=args, env=os.environ)
    except ValueError as error:
        parser.error(str(error))

    configure_logging(config.log_level, config.log_format)
    logger = logging.getLogger(__name__)
    logger.info(
        "cli configuration resolved",
        extra={
            "event": "cli.config.resolved",
            "working_dir": str(config.working_dir),
            "selector": config.selector_expression,
            "action_count": len(config.action_commands),
            "finalization_action": config.finalization_command is not None,
            "strict_fail": config.strict_fail,
            "cleanup": config.cleanup,
        },
    )

    try:
        run_config = _build_run_configuration(config, os.environ)
    except ValueError as error:
        parser.error(str(error))

    try:
        outcome = RepositoryFanout(run_config).execute()
    except RunError as error:
        logger.error("cli execution failed", extra={"event": "cli.execution.failed", "error": str(error)})
        print(f"Run failed: {error}", file=sys.stderr)
        if error.cause is not None and str(error.cause) not in str(error):
            print(f"Caused by: {error.cause}", file=sys.stderr)
        return 1

    _print_summary(outcome)
    return 0


def _build_run_configuration(config: AppConfig, env: Mapping[str, str]) -> RunConfiguration:
    selector = parse_selector_expression(
        config.selector_expression,
        access_token=config.access_token,
        env=env,
    )

    actions: list[RepositoryAction] = [CommandAction(command) for command in config.action_commands]
    action = actions[0] if len(actions) == 1 else ActionSequence(actions)
    finalization = CommandAction(config.finalization_command) if config.finalization_command else None

    return RunConfiguration(
        selector=selector,
        action=action,
        finalization_action=finalization,
        credentials=_build_credentials(config),
        status_sink=ConsoleStatusSink(),
        working_dir=config.working_dir,
        strict_fail=config.strict_fail,
        cleanup=config.cleanup,
        clear_existing=config.clear_existing,
    )


def _build_credentials(config: AppConfig) -> GitCredentials:
    if config.ssh_key is not None:
        return SshKeyCredentials(config.ssh_key, disable_host_key_checking=config.ssh_insecure)
    if config.access_token:
        return UsernamePasswordCredentials.from_access_token(config.access_token)
    return NoCredentials()


def _print_summary(outcome: RunOutcome) -> None:
    print(f"Working directory: {outcome.working_dir}")
    print(f"Repositories processed: {outcome.repository_count}")
    print(f"Failed repositories: {len(outcome.failed_repositories)}")
    for failure in outcome.failures:
        print(f"- {failure.message}")


if __name__ == "__main__":
    raise SystemExit(main())
