#app/models/enums.py
from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Material(str, Enum):
    fiberglass = "fiberglass"
    polyester = "polyester"
    stainless = "stainless"


class MeshType(str, Enum):
    fixed = "fixed"
    sliding = "sliding"
    retractable = "retractable"
    pleated = "pleated"
    magnetic = "magnetic"
    velcro = "velcro"


class WarrantyTier(str, Enum):
    basic = "basic"
    standard = "standard"
    premium = "premium"


class QuoteStatus(str, Enum):
    # lifecycle, independent of payment
    pending = "pending"
    accepted = "accepted"
    completed = "completed"


class PaymentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class InquiryType(str, Enum):
    general = "general"
    quote = "quote"
    technical = "technical"
    complaint = "complaint"


class InquiryStatus(str, Enum):
    new = "new"
    in_progress = "in-progress"
    resolved = "resolved"


class InstallationStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"
