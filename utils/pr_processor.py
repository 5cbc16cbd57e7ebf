import os
import tempfile

from auth import get_installation_access_token
from utils.config import GITHUB, GitParams, RepoConfig, extract_project_from_env, extract_server_details_from_env
from utils.delta import create_all_issues_rows, create_new_issues_rows, sort_rows
from utils.environment_verifier import verify_github_frogbot_environment
from utils.errors import (
    ConfigurationError,
    FrogbotError,
    ScanCancelledError,
    ScanPullRequestError,
    SecurityIssuesFoundError,
)
from utils.installer import run_install_if_needed
from utils.pr_commenter import create_pr_comment
from utils.report_renderer import create_pull_request_message, get_output_writer
from vcs.github import GitHubClient
from xray.audit import AuditScanner
from xray.scan_params import create_xray_scan_params


def get_full_path_working_dirs(project, base_wd):
    full_paths = []
    for wd in project.working_dirs:
        if os.path.isabs(wd) or os.path.normpath(wd).split(os.sep)[0] == "..":
            raise ConfigurationError(f"working directory '{wd}' must be relative to the repository root")
        full_paths.append(os.path.normpath(os.path.join(base_wd, wd)))
    return full_paths


def _check_cancelled(cancel_event, step):
    if cancel_event is not None and cancel_event.is_set():
        raise ScanCancelledError(f"pull request scan was cancelled before {step}")


def _get_base_branch(client, git):
    if git.base_branch:
        return git.base_branch
    return client.get_repository_info(git.repo_owner, git.repo_name).default_branch


def scan_working_dir(scanner, project, params, head_wd, baseline_wd, cancel_event=None):
    """Install, scan the baseline and the head of one working directory and return the new issue rows."""
    run_install_if_needed(project, head_wd, project.fail_on_install_error)
    has_baseline = baseline_wd is not None and os.path.isdir(baseline_wd)
    if has_baseline:
        # The target branch only sets the comparison floor, a broken install there shouldn't block the PR
        run_install_if_needed(project, baseline_wd, False)

    _check_cancelled(cancel_event, f"scanning {head_wd}")
    previous_scans = scanner.scan(params, baseline_wd) if has_baseline else None
    current_scans = scanner.scan(params, head_wd)

    if previous_scans is None:
        print(f"ℹ️ {head_wd} doesn't exist on the target branch, reporting all of its issues")
        return create_all_issues_rows(current_scans, params.mode, project.include_licenses)
    return create_new_issues_rows(previous_scans, current_scans, params.mode, project.include_licenses)


def _scan_projects(repo_config, scanner, head_dir, baseline_dir, cancel_event):
    rows, failures, modes = [], [], set()
    for project in repo_config.projects:
        params = create_xray_scan_params(project.watches, project.project_key)
        params.include_licenses = project.include_licenses
        modes.add(params.mode)

        head_wds = get_full_path_working_dirs(project, head_dir)
        baseline_wds = get_full_path_working_dirs(project, baseline_dir)
        for wd, head_wd, baseline_wd in zip(project.working_dirs, head_wds, baseline_wds):
            _check_cancelled(cancel_event, f"processing {wd}")
            print(f"🔍 Scanning working directory '{wd}'")
            try:
                wd_rows = scan_working_dir(scanner, project, params, head_wd, baseline_wd, cancel_event)
            except ScanCancelledError:
                raise
            except FrogbotError as e:
                print(f"❌ Working directory '{wd}' failed: {e}")
                if repo_config.fail_fast:
                    raise ScanPullRequestError([(wd, e)]) from e
                failures.append((wd, e))
                continue
            print(f"✅ Found {len(wd_rows)} new issue(s) in '{wd}'")
            rows.extend(wd_rows)
    mode = modes.pop() if len(modes) == 1 else None
    return rows, failures, mode


def scan_pull_request(repo_config, client, scanner=None, head_dir=".", cancel_event=None):
    """
    Scan the pull request's head against its target branch and comment with the new issues.

    Returns the new issue rows. Raises SecurityIssuesFoundError when there are new issues
    and the repository is configured to fail on them.
    """
    git = repo_config.git
    scanner = scanner or AuditScanner(repo_config.server)

    if git.provider == GITHUB:
        verify_github_frogbot_environment(client, repo_config)

    with tempfile.TemporaryDirectory(prefix="frogbot-baseline-") as baseline_dir:
        _check_cancelled(cancel_event, "downloading the target branch")
        base_branch = _get_base_branch(client, git)
        print(f"⬇️ Downloading {git.repo_owner}/{git.repo_name}@{base_branch}")
        client.download_repository(git.repo_owner, git.repo_name, base_branch, baseline_dir)
        rows, failures, mode = _scan_projects(repo_config, scanner, head_dir, baseline_dir, cancel_event)

    rows = sort_rows(rows)
    report = create_pull_request_message(rows, get_output_writer(repo_config.simplified_output), mode)

    _check_cancelled(cancel_event, "publishing the report")
    create_pr_comment(client, git, report)

    if failures:
        raise ScanPullRequestError(failures)
    if rows and repo_config.fail_on_security_issues:
        raise SecurityIssuesFoundError(len(rows))
    return rows


def process_pull_request(payload):
    """Scan a pull request delivered by a GitHub App webhook."""
    pr = payload["pull_request"]
    installation_id = payload["installation"]["id"]

    access_token = get_installation_access_token(installation_id)
    client = GitHubClient(access_token)

    owner, repo_name = pr["base"]["repo"]["full_name"].split("/", 1)
    repo_config = RepoConfig(
        git=GitParams(
            provider=GITHUB,
            repo_owner=owner,
            repo_name=repo_name,
            token=access_token,
            pull_request_id=pr["number"],
            base_branch=pr["base"]["ref"],
        ),
        server=extract_server_details_from_env(),
        projects=[extract_project_from_env()],
        # A webhook has no build to fail, the comment is the whole outcome
        fail_on_security_issues=False,
    )

    head_owner, head_repo = pr["head"]["repo"]["full_name"].split("/", 1)
    with tempfile.TemporaryDirectory(prefix="frogbot-head-") as head_dir:
        client.download_repository(head_owner, head_repo, pr["head"]["sha"], head_dir)
        return scan_pull_request(repo_config, client, head_dir=head_dir)
