from enum import Enum


class RequirementCategory(str, Enum):
    TECHNICAL = "Technical"
    QUALIFICATION = "Qualification"
    COMPLIANCE = "Compliance"
    DELIVERABLE = "Deliverable"
    OPERATIONAL = "Operational"
    FINANCIAL = "Financial"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RfpStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"


class ResponseStatus(str, Enum):
    DRAFT = "draft"
    FINAL = "final"


class RemoteErrorKind(str, Enum):
    THROTTLED = "throttled"
    QUOTA_EXHAUSTED = "quota_exhausted"
    MALFORMED = "malformed"
    FAILED = "failed"


class SourceTier(str, Enum):
    """Where a merged field value came from."""
    REMOTE = "remote"
    PATTERN = "pattern"
    STORED = "stored"
    NONE = "none"


class AgentName(str, Enum):
    """Graph node names, in execution order."""
    LOAD_DOCUMENT = "load_document"
    PATTERN_EXTRACTION = "pattern_extraction"
    REMOTE_EXTRACTION = "remote_extraction"
    RECONCILE = "reconcile"
    PERSIST = "persist"
