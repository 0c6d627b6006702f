class DynamicFieldError(Exception):
    """Base class for programming errors raised by the dynamic-fields engine."""


class InvalidFieldType(DynamicFieldError, ValueError):
    def __init__(self, field_type):
        self.field_type = field_type
        super().__init__(f"Unknown field type: {field_type!r}")


class IndexOutOfRange(DynamicFieldError, IndexError):
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} out of range for {length} field(s)")
