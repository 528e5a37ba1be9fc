from .formatting import format_bytes, format_upload_time
from .normalizer import (
    MAX_TAGS,
    add_tags,
    is_normalized_tag,
    normalize_tag,
    normalize_tag_list,
    split_tag_input,
)

__all__ = [
    "MAX_TAGS",
    "add_tags",
    "format_bytes",
    "format_upload_time",
    "is_normalized_tag",
    "normalize_tag",
    "normalize_tag_list",
    "split_tag_input",
]
