import enum

# Stored as plain String columns; values are the wire/document values.


class UserRole(str, enum.Enum):
    WEB_OWNER = "web_owner"
    WORKSHOP_OWNER = "workshop_owner"
    MECHANIC = "mechanic"
    CLIENT = "client"


class AssessmentStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    AWAITING_CLIENT = "awaiting_client"
    QUOTED = "quoted"


class ClientStatus(str, enum.Enum):
    PENDING_REVIEW = "pending_review"
    REVIEWED = "reviewed"
    PARTIALLY_ACCEPTED = "partially_accepted"
    FULLY_ACCEPTED = "fully_accepted"
    REJECTED = "rejected"


class TaskStatus(str, enum.Enum):
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class QuotationStatus(str, enum.Enum):
    PENDING_CLIENT_APPROVAL = "pending_client_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkOrderStatus(str, enum.Enum):
    PENDING_ASSIGNMENT = "pending_assignment"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class InvoiceStatus(str, enum.Enum):
    ISSUED = "issued"
    PAID = "paid"
    VOID = "void"
