from __future__ import annotations

"""Project-wide constants used across modules.

This module isolates public constants to reduce cross-module coupling.
"""

# Permission bits for directories and files created by the renderer itself.
OWNER_RWX: int = 0o700
OWNER_RW: int = 0o600

# Reserved directory inside a destination; holds manifests and must never be
# written by a template.
RESERVED_DEST_DIR: str = '.stencil'

# Name parts of the temporary directories created during a render.
SCRATCH_DIR_PREFIX: str = 'scratch-'
BACKUP_DIR_PREFIX: str = 'backup-'

# Entries at the template root that an include never copies.
TEMPLATE_SPEC_FILE: str = 'spec.yaml'
GOLDEN_TEST_DIR: str = 'testdata/golden'

# Default value for the include ignore list. Callers pass it explicitly.
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = ('.DS_Store', '.bin', '.ssh', '.git')

INCLUDE_FROM_TEMPLATE: str = 'template'
INCLUDE_FROM_DESTINATION: str = 'destination'

# Environment switches.
ENV_JSON_LOGS: str = 'STENCIL_JSON_LOGS'
ENV_LOG_LEVEL: str = 'STENCIL_LOG_LEVEL'
ENV_TRACE_IO: str = 'STENCIL_TRACE_IO'
ENV_KEEP_TEMP_DIRS: str = 'STENCIL_KEEP_TEMP_DIRS'
