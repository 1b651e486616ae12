"""typescan: scan Python distributions into a queryable multi-index of types, members and tags.

Modules:
- vfs/: Uniform file listing over directories, zip archives and streamed tar archives.
- adapters/: Module descriptors from static parsing or from executing the module.
- scanners/: Extraction policies, one index per scanner kind.
- store.py: The multi-index with transitive closure queries.
- scan.py: Orchestration of locators, files and scanners, sequential or pooled.
- expand.py: Supertype closure expansion for ancestors outside the scanned set.
- index.py: The ``TypeIndex`` query facade, snapshots and merging.
- config.py, errors.py, log.py, serializers.py: Configuration, failures, logging and snapshot format.
"""

from .config import ScanConfig
from .errors import ConfigurationError, ExtractionError, MergeError, ResolutionError, TypeScanError
from .expand import ImportResolver, MappingResolver, TypeResolver, expand_supertypes
from .filters import ScannerFilter
from .index import TypeIndex
from .scan import scan
from .serializers import JsonSerializer
from .store import Store

__all__ = [
	"ConfigurationError",
	"ExtractionError",
	"ImportResolver",
	"JsonSerializer",
	"MappingResolver",
	"MergeError",
	"ResolutionError",
	"ScanConfig",
	"ScannerFilter",
	"Store",
	"TypeIndex",
	"TypeResolver",
	"TypeScanError",
	"expand_supertypes",
	"scan",
]
