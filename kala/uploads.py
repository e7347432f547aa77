import os
from uuid import uuid4
from werkzeug.utils import secure_filename
from flask import current_app


def save_upload(file_storage, subdir: str) -> str:
    """
    Stores the upload as <UPLOAD_FOLDER>/<subdir>/<random>.<ext>
    and returns the absolute path. The caller removes it when done.
    The extension was already checked by the form.
    """
    filename = secure_filename(getattr(file_storage, "filename", "") or "")
    ext = os.path.splitext(filename)[1].lower()
    new_name = f"{uuid4().hex}{ext}"

    folder = os.path.join(current_app.config["UPLOAD_FOLDER"], subdir)
    os.makedirs(folder, exist_ok=True)

    abs_path = os.path.join(folder, new_name)
    file_storage.save(abs_path)
    return abs_path

def save_import_file(file_storage) -> str:
    return save_upload(file_storage, "imports")

def discard_upload(path: str) -> None:
    if path and os.path.exists(path):
        os.remove(path)
