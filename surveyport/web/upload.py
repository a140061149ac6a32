"""
Upload staging for the surveyport web interface.
Saves one uploaded file per import request under the staging directory.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


def staged_filename(original_name: Optional[str]) -> str:
    """Unique, filesystem-safe name for an upload, keeping its extension.

    Two requests uploading the same file name never share a staging path.
    """
    safe = secure_filename(original_name or "") or "upload"
    return f"{uuid.uuid4().hex}_{safe}"


def stage_upload(file: FileStorage, upload_dir: str) -> Path:
    """
    Save an uploaded file into the staging directory.

    Args:
        file: Werkzeug FileStorage from request.files
        upload_dir: Staging directory (created if missing)

    Returns:
        Path of the staged file; the import transaction deletes it
    """
    os.makedirs(upload_dir, exist_ok=True)
    target = Path(upload_dir) / staged_filename(file.filename)
    file.save(str(target))
    return target
