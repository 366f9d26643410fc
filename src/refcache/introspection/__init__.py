from .lookup import MetadataLookup
from .models import FieldInfo, MethodInfo
from .scanner import scan_fields_directly, scan_methods_directly

__all__ = [
    "FieldInfo",
    "MetadataLookup",
    "MethodInfo",
    "scan_fields_directly",
    "scan_methods_directly",
]
