from ._bucket import Bucket
from ._file import File
from ._models import ObjectMetadata
from .component import Storage

__all__ = ["Bucket", "File", "ObjectMetadata", "Storage"]
