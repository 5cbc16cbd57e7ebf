FROGBOT_COMMENT_MARKER = "<!-- frogbot:scan-pull-request -->"


def find_frogbot_comment(client, git, marker=FROGBOT_COMMENT_MARKER):
    """
    Look through the PR comments for the one a previous Frogbot run left.
    Newest match wins if there are several.
    """
    comments = client.list_comments(git.repo_owner, git.repo_name, git.pull_request_id)
    for comment in reversed(list(comments)):
        if marker in (comment.content or ""):
            return comment
    return None
