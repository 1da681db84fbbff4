"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, g, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from dropvault.api.v1.identity import current_owner, require_identity
from dropvault.api.v1.models import (
    error_response,
    file_info,
    message_response,
    upload_limits_response,
    upload_parser,
    upload_response,
    user_upload_response,
)
from dropvault.api.v1.uploads import FileStorageUpload
from dropvault.application.file_share_service import FileShareService
from dropvault.domain.errors import (
    ErrorCategory,
    categorize_error,
    create_error_response,
    is_client_error,
)


def _file_share_service() -> FileShareService:
    return current_app.container.resolve(FileShareService)


def _domain_error_response(e: Exception, where: str):
    """
    Map an exception to a structured error response.

    Client errors carry the domain message as detail. Server errors are
    logged with traceback and answered with the generic message only.
    """
    category, status_code = categorize_error(e)
    if not is_client_error(e):
        current_app.logger.exception(f"Unexpected error in {where}: {e}")
        return create_error_response(category, str(e), status_code=status_code)

    current_app.logger.info(f"{where} rejected ({category.value}): {e}")
    return create_error_response(category, str(e), status_code=status_code, detail=str(e))


def _uploaded_file():
    """
    The multipart 'file' part as an UploadSource.

    Returns:
        (source, None) on success, (None, error_response) otherwise
    """
    try:
        file_storage = request.files.get("file")
    except RequestEntityTooLarge:
        return None, create_error_response(
            ErrorCategory.FILE_TOO_LARGE,
            "Request body exceeds MAX_CONTENT_LENGTH",
            status_code=400,
        )

    if file_storage is None:
        return None, create_error_response(
            ErrorCategory.INVALID_REQUEST,
            "Multipart field 'file' is missing",
            status_code=400,
            detail="File is missing",
        )
    return FileStorageUpload(file_storage), None


def _attachment(handle):
    return send_file(
        handle.stream,
        as_attachment=True,
        download_name=handle.filename,
        mimetype=handle.mimetype,
    )


# =============================================================================
# Files Namespace - Anonymous uploads and downloads
# =============================================================================

files_ns = Namespace("files", description="Public file operations")


@files_ns.route("/upload")
class PublicUpload(Resource):
    """Anonymous upload"""

    @files_ns.doc("upload_public_file")
    @files_ns.expect(upload_parser)
    @files_ns.response(200, "Success", upload_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Upload a file anonymously

        The file is public, expires after the public tier's expiry period
        and can be downloaded a limited number of times.
        """
        source, error = _uploaded_file()
        if error:
            return error

        try:
            return _file_share_service().upload_public(source), 200
        except Exception as e:
            return _domain_error_response(e, "/files/upload")


@files_ns.route("/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class PublicFileInfo(Resource):
    """File metadata"""

    @files_ns.doc("get_file_info")
    @files_ns.response(200, "Success", file_info)
    @files_ns.response(404, "File Not Found", error_response)
    def get(self, file_id):
        """Get metadata for a live file"""
        try:
            return _file_share_service().get_file_info(file_id), 200
        except Exception as e:
            return _domain_error_response(e, "/files/<id>")


@files_ns.route("/download/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class PublicDownload(Resource):
    """File download"""

    @files_ns.doc("download_file")
    @files_ns.response(200, "File content")
    @files_ns.response(400, "Download Limit Reached", error_response)
    @files_ns.response(403, "Access Denied", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    def get(self, file_id):
        """
        Download a file

        Counts one download. Private files are only served to their owner,
        identified by the gateway's identity headers.
        """
        try:
            handle = _file_share_service().download(file_id, current_owner())
        except Exception as e:
            return _domain_error_response(e, "/files/download/<id>")
        return _attachment(handle)


# =============================================================================
# User Files Namespace - Operations for signed-in users
# =============================================================================

user_files_ns = Namespace("user_files", description="Signed-in user file operations")


@user_files_ns.route("")
class UserFileList(Resource):
    """Owned files"""

    @user_files_ns.doc("list_user_files")
    @user_files_ns.response(200, "Success", [file_info])
    @user_files_ns.response(401, "Authentication Required", error_response)
    @require_identity
    def get(self):
        """List the caller's live files, most recent first"""
        try:
            return _file_share_service().list_user_files(g.owner), 200
        except Exception as e:
            return _domain_error_response(e, "/user/files")


@user_files_ns.route("/upload")
class UserUpload(Resource):
    """Signed-in upload"""

    @user_files_ns.doc("upload_user_file")
    @user_files_ns.expect(upload_parser)
    @user_files_ns.response(200, "Success", user_upload_response)
    @user_files_ns.response(400, "Bad Request", error_response)
    @user_files_ns.response(401, "Authentication Required", error_response)
    @require_identity
    def post(self):
        """
        Upload a private file

        Private files use the user tier's limits and can only be
        downloaded by their owner.
        """
        source, error = _uploaded_file()
        if error:
            return error

        try:
            return _file_share_service().upload_for_user(source, g.owner), 200
        except Exception as e:
            return _domain_error_response(e, "/user/files/upload")


@user_files_ns.route("/<string:file_id>")
@user_files_ns.param("file_id", "The file identifier")
class UserFile(Resource):
    """Single owned file"""

    @user_files_ns.doc("get_user_file_info")
    @user_files_ns.response(200, "Success", file_info)
    @user_files_ns.response(401, "Authentication Required", error_response)
    @user_files_ns.response(404, "File Not Found", error_response)
    @require_identity
    def get(self, file_id):
        """Get metadata for a live file"""
        try:
            return _file_share_service().get_file_info(file_id), 200
        except Exception as e:
            return _domain_error_response(e, "/user/files/<id>")

    @user_files_ns.doc("delete_user_file")
    @user_files_ns.response(200, "Deleted", message_response)
    @user_files_ns.response(401, "Authentication Required", error_response)
    @user_files_ns.response(404, "File Not Found", error_response)
    @require_identity
    def delete(self, file_id):
        """
        Delete one of the caller's files

        Someone else's file answers 404, exactly like an unknown id.
        """
        try:
            return _file_share_service().delete_user_file(file_id, g.owner), 200
        except Exception as e:
            return _domain_error_response(e, "DELETE /user/files/<id>")


@user_files_ns.route("/download/<string:file_id>")
@user_files_ns.param("file_id", "The file identifier")
class UserDownload(Resource):
    """Signed-in download"""

    @user_files_ns.doc("download_user_file")
    @user_files_ns.response(200, "File content")
    @user_files_ns.response(400, "Download Limit Reached", error_response)
    @user_files_ns.response(401, "Authentication Required", error_response)
    @user_files_ns.response(403, "Access Denied", error_response)
    @user_files_ns.response(404, "File Not Found", error_response)
    @require_identity
    def get(self, file_id):
        """Download a file as the signed-in caller"""
        try:
            handle = _file_share_service().download(file_id, g.owner)
        except Exception as e:
            return _domain_error_response(e, "/user/files/download/<id>")
        return _attachment(handle)


# =============================================================================
# Config Namespace - Client-visible limits
# =============================================================================

config_ns = Namespace("config", description="Service configuration")


@config_ns.route("/upload-limits")
class UploadLimits(Resource):
    """Upload policy"""

    @config_ns.doc("get_upload_limits")
    @config_ns.response(200, "Success", upload_limits_response)
    def get(self):
        """Size, expiry and download limits per upload tier"""
        return _file_share_service().upload_limits(), 200
