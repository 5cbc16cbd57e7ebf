import subprocess

from utils.errors import InstallError


def run_install_if_needed(project, working_dir, fail_on_error):
    """
    Run the project's install command inside working_dir before it gets scanned.

    Projects without a lock file need their dependencies installed for the scan to
    see the full tree. When fail_on_error is false a failed install is only reported.
    """
    if not project.install_command_name:
        return

    command = [project.install_command_name, *project.install_command_args]
    print(f"📦 Executing '{' '.join(command)}' at {working_dir}")
    try:
        result = subprocess.run(command, cwd=working_dir or None, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        message = f"'{' '.join(command)}' command failed: {e}"
        if fail_on_error:
            raise InstallError(message) from e
        print(f"⚠️ {message}")
        return

    if result.returncode != 0:
        message = f"'{' '.join(command)}' command failed with exit code {result.returncode}:\n{result.stderr.strip() or result.stdout.strip()}"
        if fail_on_error:
            raise InstallError(message)
        print(f"⚠️ {message}")
        return

    print(f"✅ '{' '.join(command)}' finished successfully")
