import os

from flask import Blueprint, send_from_directory

from services import get_storage
from utils.errors import NotFoundError

files_bp = Blueprint("files", __name__)


# No token: stored names are random
@files_bp.route("/<namespace>/<path:filename>", methods=["GET"])
def serve_file(namespace, filename):
    storage = get_storage()
    path = storage.path_for(namespace, filename)
    if not os.path.isfile(path):
        raise NotFoundError("File not found")
    return send_from_directory(storage.directory(namespace), os.path.basename(path))
