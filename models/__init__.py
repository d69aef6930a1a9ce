from .profile import Profile
from .drive_connection import DriveConnection
from .project import Project, ProjectStatus
from .folder import Folder
from .file import FileMetadata
from .share_link import ShareLink, AccessType
from .audit_log import AuditLog, AuditAction
# Add other model files here as needed
