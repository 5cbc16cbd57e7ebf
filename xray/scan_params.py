from dataclasses import dataclass, field
from typing import List

from xray.models import ScanMode


@dataclass
class ScanParams:
    watches: List[str] = field(default_factory=list)
    project_key: str = ""
    include_vulnerabilities: bool = False
    include_licenses: bool = False

    @property
    def mode(self) -> ScanMode:
        # Watches and projects make Xray evaluate policies, so results come back as violations
        if self.watches or self.project_key:
            return ScanMode.VIOLATIONS
        return ScanMode.VULNERABILITIES


def create_xray_scan_params(watches, project_key) -> ScanParams:
    params = ScanParams()
    if watches:
        params.watches = list(watches)
        return params
    if project_key:
        params.project_key = project_key
        return params
    # No context was provided, therefore all vulnerabilities will be retrieved
    params.include_vulnerabilities = True
    return params
