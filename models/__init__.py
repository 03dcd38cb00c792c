from .user import User  # noqa: F401
from .video import Video  # noqa: F401
from .share_link import ShareableLink  # noqa: F401
