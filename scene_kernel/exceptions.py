"""
Typed Exception Hierarchy for the Scene Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The serialization engine promises callers that it never raises: a component
with unreadable members still yields a (possibly nearly empty) document.
Internally, however, each handler needs to tell *why* a member was dropped,
because the three outcomes are rendered differently:

  - an access failure may become an inline "<error: ...>" string,
  - an extraction failure drops the key (distinct from an explicit null),
  - a conversion failure drops the key and logs a warning.

Every exception has a CODE attribute (machine-readable) and carries
structured DATA, so the facade can turn it into a SerializationDiagnostic
without parsing messages.

Example:
    try:
        node = structural.to_node(value)
    except ConversionError as e:
        sink.record(e.member, FailureKind.CONVERSION, e.reason)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    SceneKernelError (base)
    |
    +-- SerializationError
    |   +-- MemberAccessError
    |   +-- ExtractionError
    |   +-- ConversionError
    |
    +-- HandlerRegistrationError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|----------------------------------------
Serialization   | MEMBER_ACCESS_FAILURE  | Reading a field/property raised
                | EXTRACTION_FAILURE     | Hostile value has no known shape
                | CONVERSION_FAILURE     | Value cannot be represented as JSON
----------------|------------------------|----------------------------------------
Registry        | DUPLICATE_HANDLER      | Handler target registered twice
----------------|------------------------|----------------------------------------
Configuration   | INVALID_CONFIGURATION  | YAML section has the wrong shape

Only ConfigurationError and HandlerRegistrationError ever reach callers; the
SerializationError family is contained per member by the engine.
"""


class SceneKernelError(Exception):
    """
    Base exception for all scene kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "SCENE_KERNEL_ERROR"


# Serialization exceptions


class SerializationError(SceneKernelError):
    """Base exception for per-member serialization failures."""

    code: str = "SERIALIZATION_ERROR"


class MemberAccessError(SerializationError):
    """Reading a member from a host object raised."""

    code: str = "MEMBER_ACCESS_FAILURE"

    def __init__(self, type_name: str, member: str, cause: BaseException):
        self.type_name = type_name
        self.member = member
        self.cause_type = type(cause).__name__
        self.reason = str(cause)
        super().__init__(
            f"Could not read {type_name}.{member}: {self.cause_type}: {cause}"
        )


class ExtractionError(SerializationError):
    """A hostile value matched no extraction strategy."""

    code: str = "EXTRACTION_FAILURE"

    def __init__(self, type_name: str, member: str, value_type: str):
        self.type_name = type_name
        self.member = member
        self.value_type = value_type
        self.reason = f"no extraction strategy for {value_type}"
        super().__init__(
            f"Could not extract {type_name}.{member}: {self.reason}"
        )


class ConversionError(SerializationError):
    """A value cannot be represented in the JSON output."""

    code: str = "CONVERSION_FAILURE"

    def __init__(self, value_type: str, reason: str):
        self.value_type = value_type
        self.reason = reason
        super().__init__(f"Cannot convert value of type {value_type}: {reason}")


# Registry exceptions


class HandlerRegistrationError(SceneKernelError):
    """A handler with the same target and match mode is already registered."""

    code: str = "DUPLICATE_HANDLER"

    def __init__(self, handler_name: str, target: str, existing: str):
        self.handler_name = handler_name
        self.target = target
        self.existing = existing
        super().__init__(
            f"Handler {handler_name} targets {target}, "
            f"already handled by {existing}"
        )


# Configuration exceptions


class ConfigurationError(SceneKernelError):
    """A serializer configuration section is malformed."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, section: str, reason: str):
        self.section = section
        self.reason = reason
        super().__init__(f"Invalid configuration section '{section}': {reason}")
