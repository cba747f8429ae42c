from .files import FileService  # NOQA: F401
from .static import StaticService  # NOQA: F401

# EOF
