import json
import os
import subprocess

from utils.errors import MalformedScanResultError, ScanError
from xray.models import parse_scan_results

JFROG_CLI = "jf"


def build_audit_command(params, cli=JFROG_CLI):
    command = [cli, "audit", "--format=json", "--fail=false"]
    if params.watches:
        command.append(f"--watches={','.join(params.watches)}")
    if params.project_key:
        command.append(f"--project={params.project_key}")
    if params.include_vulnerabilities:
        command.append("--vuln")
    if params.include_licenses:
        command.append("--licenses")
    return command


class AuditScanner:
    """Scans a working directory's dependencies with the JFrog CLI and Xray."""

    def __init__(self, server, cli=JFROG_CLI):
        self.server = server
        self.cli = cli

    def scan(self, params, working_dir):
        command = build_audit_command(params, self.cli)
        env = {**os.environ, **self.server.as_env(), "CI": "true"}
        print(f"🔍 Scanning {working_dir} ({params.mode.value})")
        try:
            result = subprocess.run(command, cwd=working_dir, env=env, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
        except OSError as e:
            raise ScanError(f"failed to run '{self.cli}': {e}") from e

        if result.returncode != 0:
            raise ScanError(f"'{' '.join(command)}' failed with exit code {result.returncode}:\n{result.stderr.strip()}")

        try:
            data = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise MalformedScanResultError(f"couldn't parse audit output of {working_dir}: {e}") from e
        return parse_scan_results(data)
