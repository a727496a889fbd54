"""常量定义：集中维护 HTTP 状态码与目录树相关的固定值。"""

HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_UNAUTHORIZED = 401
HTTP_STATUS_FORBIDDEN = 403
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_INTERNAL_SERVER_ERROR = 500

ACCESS_TOKEN_TYPE = "bearer"

# 目录树
PATH_SEPARATOR = "/"
FOLDER_MIME_TYPE = "folder"
DEFAULT_FILE_MIME_TYPE = "application/octet-stream"
MAX_NAME_LENGTH = 255
