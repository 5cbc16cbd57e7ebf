import io
import os
import shutil
import tempfile
import zipfile

import requests

from utils.errors import VcsError


def download_and_extract_zip(url, headers, local_path):
    """
    Download a repository zip archive and extract it into local_path.

    Provider archives wrap the tree in a single '<repo>-<sha>' folder, which is dropped.
    """
    try:
        resp = requests.get(url, headers=headers, timeout=300)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise VcsError(f"failed to download repository archive from {url}: {e}") from e

    try:
        zip_file = zipfile.ZipFile(io.BytesIO(resp.content))
    except zipfile.BadZipFile as e:
        raise VcsError(f"repository archive from {url} is not a valid zip file") from e

    os.makedirs(local_path, exist_ok=True)
    with tempfile.TemporaryDirectory() as tmp_dir:
        zip_file.extractall(tmp_dir)
        entries = os.listdir(tmp_dir)
        root = os.path.join(tmp_dir, entries[0]) if len(entries) == 1 and os.path.isdir(os.path.join(tmp_dir, entries[0])) else tmp_dir
        for name in os.listdir(root):
            shutil.move(os.path.join(root, name), os.path.join(local_path, name))
