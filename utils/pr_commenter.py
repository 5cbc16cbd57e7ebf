from utils.pr_comment_cache import FROGBOT_COMMENT_MARKER, find_frogbot_comment

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


def build_comment_body(report, marker=FROGBOT_COMMENT_MARKER):
    return f"{marker}\n{report}"


def create_pr_comment(client, git, report):
    """
    Publish the report on the pull request, reusing Frogbot's previous comment.

    The previous comment is found by its marker, it is edited only when the report
    changed, so re-running on the same head leaves the PR untouched.
    """
    body = build_comment_body(report)
    existing = find_frogbot_comment(client, git)

    if existing is None:
        client.create_comment(git.repo_owner, git.repo_name, git.pull_request_id, body)
        print(f"💬 Created Frogbot comment on pull request #{git.pull_request_id}")
        return CREATED

    if existing.content.replace("\r\n", "\n") == body:
        print(f"ℹ️ Frogbot comment on pull request #{git.pull_request_id} is up to date")
        return UNCHANGED

    client.update_comment(git.repo_owner, git.repo_name, git.pull_request_id, existing.id, body)
    print(f"💬 Updated Frogbot comment {existing.id} on pull request #{git.pull_request_id}")
    return UPDATED
