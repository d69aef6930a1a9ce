from .base import Repository, SoftDeleteRepository
from .projects import ProjectRepository
from .folders import FolderRepository
from .files import FileRepository
from .share_links import ShareLinkRepository
from .profiles import ProfileRepository
from .drive_connections import DriveConnectionRepository
from .audit_logs import AuditLogRepository
