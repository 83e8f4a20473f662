"""
app/mappers package marker.
"""

from app.mappers.field_mapper import FieldMapper
from app.mappers.transforms import TransformLibrary, default_transform_library

__all__ = [
    "FieldMapper",
    "TransformLibrary",
    "default_transform_library",
]
