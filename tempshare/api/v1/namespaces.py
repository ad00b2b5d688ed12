"""
API Namespaces - Organized endpoint groups
"""

from flask import current_app, g, request, send_file
from flask_restx import Namespace, Resource

from tempshare.api.auth import require_admin, require_caller
from tempshare.api.v1.models import (
    delete_response,
    error_response,
    file_list_response,
    object_preview,
    upload_response,
    usage_stats,
)
from tempshare.application.admin_service import AdminReportService
from tempshare.application.share_service import IncomingFile, ShareService
from tempshare.domain.errors import ErrorCategory, ShareError, create_error_response

PASSWORD_HEADER = "X-Share-Password"

_STATUS_BY_CATEGORY = {
    ErrorCategory.OBJECT_NOT_FOUND: 404,
    ErrorCategory.OBJECT_EXPIRED: 410,
    ErrorCategory.PASSWORD_REQUIRED: 401,
    ErrorCategory.INVALID_PASSWORD: 401,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.STORAGE_CONFLICT: 409,
}


def _share_error_response(error: ShareError):
    status = _STATUS_BY_CATEGORY.get(error.category, 500)
    return create_error_response(error.category, str(error), status_code=status)


def _system_error_response(context: str, error: Exception):
    current_app.logger.exception(f"Unexpected error in {context}: {error}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR, f"Unexpected error: {error}", status_code=500
    )


def _share_service() -> ShareService:
    return current_app.container.resolve(ShareService)


def _supplied_password():
    """Password from the query string or the X-Share-Password header."""
    return request.args.get("password") or request.headers.get(PASSWORD_HEADER) or None


def _client_origin() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or ""


# =============================================================================
# Files Namespace - Owner operations
# =============================================================================

files_ns = Namespace("files", description="Upload and manage your shared files")


@files_ns.route("")
class FileCollection(Resource):
    """Upload files and list your own uploads"""

    @files_ns.doc("upload_files", security="bearer")
    @files_ns.response(201, "All files stored", upload_response)
    @files_ns.response(207, "Some files stored", upload_response)
    @files_ns.response(400, "No files supplied", error_response)
    @files_ns.response(401, "Authentication required", error_response)
    @files_ns.response(500, "No file could be stored", upload_response)
    @require_caller
    def post(self):
        """
        Upload one or more files

        Multipart form with one or more ``files`` parts and an optional
        ``password`` that protects every file of the upload. Each file gets
        its own share link and expires 24 hours after upload.
        """
        uploads = request.files.getlist("files") or request.files.getlist("files[]")
        uploads = [f for f in uploads if f and f.filename]
        if not uploads:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST, "No files supplied", status_code=400
            )

        password = request.form.get("password") or None
        incoming = [
            IncomingFile(
                filename=f.filename,
                content_type=f.mimetype or "application/octet-stream",
                stream=f.stream,
            )
            for f in uploads
        ]

        try:
            batch = _share_service().upload_files(g.caller.caller_id, incoming, password)
        except Exception as e:
            return _system_error_response("upload", e)

        if batch.all_failed:
            status = 500
        elif batch.is_partial:
            status = 207
        else:
            status = 201
        return batch.to_dict(), status

    @files_ns.doc("list_own_files", security="bearer")
    @files_ns.response(200, "Success", file_list_response)
    @files_ns.response(401, "Authentication required", error_response)
    @require_caller
    def get(self):
        """List your uploads, newest first"""
        try:
            summaries = _share_service().list_owned(g.caller.caller_id)
        except Exception as e:
            return _system_error_response("file listing", e)

        return {"files": [s.to_dict() for s in summaries]}, 200


@files_ns.route("/<string:object_id>")
@files_ns.param("object_id", "The share identifier")
class FileItem(Resource):
    """Delete one of your uploads"""

    @files_ns.doc("delete_file", security="bearer")
    @files_ns.response(200, "Deleted", delete_response)
    @files_ns.response(401, "Authentication required", error_response)
    @files_ns.response(403, "Not the owner", error_response)
    @files_ns.response(404, "Not found", error_response)
    @require_caller
    def delete(self, object_id):
        """Delete a file you uploaded"""
        try:
            _share_service().delete_object(
                object_id, g.caller.caller_id, caller_is_admin=g.caller.is_admin
            )
        except ShareError as e:
            return _share_error_response(e)
        except Exception as e:
            return _system_error_response("file delete", e)

        return {"message": "File deleted"}, 200


# =============================================================================
# Share Namespace - Anonymous link access
# =============================================================================

share_ns = Namespace("share", description="Access shared files by link")


@share_ns.route("/<string:object_id>/info")
@share_ns.param("object_id", "The share identifier")
@share_ns.param("password", "Share password", _in="query")
class SharedObjectInfo(Resource):
    """Preview a shared file without downloading it"""

    @share_ns.doc("preview_shared_file")
    @share_ns.response(200, "Success", object_preview)
    @share_ns.response(401, "Password required or invalid", error_response)
    @share_ns.response(404, "Not found", error_response)
    @share_ns.response(410, "Link expired", error_response)
    def get(self, object_id):
        """
        Get metadata for a share link

        Does not count as a download. Protected files need the password here
        too, so a client can prompt for it before starting a transfer.
        """
        try:
            preview = _share_service().preview(object_id, _supplied_password())
        except ShareError as e:
            return _share_error_response(e)
        except Exception as e:
            return _system_error_response("share preview", e)

        return preview.to_dict(), 200


@share_ns.route("/<string:object_id>")
@share_ns.param("object_id", "The share identifier")
@share_ns.param("password", "Share password", _in="query")
class SharedObject(Resource):
    """Download a shared file"""

    @share_ns.doc("download_shared_file")
    @share_ns.response(200, "File content")
    @share_ns.response(401, "Password required or invalid", error_response)
    @share_ns.response(404, "Not found", error_response)
    @share_ns.response(409, "Storage conflict", error_response)
    @share_ns.response(410, "Link expired", error_response)
    def get(self, object_id):
        """
        Download a shared file as an attachment

        Each successful download increments the access count.
        """
        try:
            served = _share_service().serve(
                object_id,
                _supplied_password(),
                client_origin=_client_origin(),
                client_agent=request.headers.get("User-Agent", ""),
            )
        except ShareError as e:
            return _share_error_response(e)
        except Exception as e:
            return _system_error_response("share download", e)

        response = send_file(
            served.stream,
            mimetype=served.content_type,
            as_attachment=True,
            download_name=served.display_name,
        )
        response.content_length = served.byte_size
        return response


# =============================================================================
# Admin Namespace - Administrator operations
# =============================================================================

admin_ns = Namespace("admin", description="Administrator operations")


@admin_ns.route("/stats")
class AdminStats(Resource):
    """Aggregate usage figures"""

    @admin_ns.doc("get_usage_stats", security="bearer")
    @admin_ns.response(200, "Success", usage_stats)
    @admin_ns.response(401, "Authentication required", error_response)
    @admin_ns.response(403, "Admin access required", error_response)
    @require_admin
    def get(self):
        """Get aggregate usage statistics"""
        try:
            stats = current_app.container.resolve(AdminReportService).usage_stats()
        except Exception as e:
            return _system_error_response("admin stats", e)

        return stats.to_dict(), 200


@admin_ns.route("/files")
class AdminFileCollection(Resource):
    """Every stored file"""

    @admin_ns.doc("list_all_files", security="bearer")
    @admin_ns.response(200, "Success", file_list_response)
    @admin_ns.response(401, "Authentication required", error_response)
    @admin_ns.response(403, "Admin access required", error_response)
    @require_admin
    def get(self):
        """List every file with its owner, newest first"""
        try:
            summaries = current_app.container.resolve(AdminReportService).list_all()
        except Exception as e:
            return _system_error_response("admin file listing", e)

        return {"files": [s.to_dict() for s in summaries]}, 200


@admin_ns.route("/files/<string:object_id>")
@admin_ns.param("object_id", "The share identifier")
class AdminFileItem(Resource):
    """Delete any file"""

    @admin_ns.doc("admin_delete_file", security="bearer")
    @admin_ns.response(200, "Deleted", delete_response)
    @admin_ns.response(401, "Authentication required", error_response)
    @admin_ns.response(403, "Admin access required", error_response)
    @admin_ns.response(404, "Not found", error_response)
    @require_admin
    def delete(self, object_id):
        """Delete any file regardless of owner"""
        try:
            _share_service().delete_object(
                object_id, g.caller.caller_id, caller_is_admin=True
            )
        except ShareError as e:
            return _share_error_response(e)
        except Exception as e:
            return _system_error_response("admin file delete", e)

        return {"message": "File deleted"}, 200
