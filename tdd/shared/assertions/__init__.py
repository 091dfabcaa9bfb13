# Custom assertion helpers

from .models import (
    assert_model_fields,
    assert_model_has_id,
    assert_model_has_timestamps,
    assert_schema_invalid,
    assert_schema_valid,
)
from .repos import (
    assert_bare_repo,
    assert_file_mode,
    hook_backups,
)

__all__ = [
    # Model assertions
    "assert_model_fields",
    "assert_model_has_id",
    "assert_model_has_timestamps",
    "assert_schema_valid",
    "assert_schema_invalid",
    # Repository assertions
    "assert_bare_repo",
    "assert_file_mode",
    "hook_backups",
]
