# Import every model so db.create_all() sees the full schema.
from opsdesk.models.user import User
from opsdesk.models.task import Task, TaskComment
from opsdesk.models.attendance import Attendance
from opsdesk.models.leave import LeaveRequest
from opsdesk.models.invoice import Client, Invoice, InvoiceItem
from opsdesk.models.meeting import Meeting, MeetingAttendee
from opsdesk.models.message import Conversation, ConversationMember, Message
from opsdesk.models.page import Block, CustomPage
from opsdesk.models.project import Project, ProjectMember
from opsdesk.models.announcement import Announcement
from opsdesk.models.payroll import BankDetails, CustomBank, Payment, SalaryInfo
from opsdesk.models.audit import AuditLog

__all__ = [
    "User",
    "Task",
    "TaskComment",
    "Attendance",
    "LeaveRequest",
    "Client",
    "Invoice",
    "InvoiceItem",
    "Meeting",
    "MeetingAttendee",
    "Conversation",
    "ConversationMember",
    "Message",
    "CustomPage",
    "Block",
    "Project",
    "ProjectMember",
    "Announcement",
    "BankDetails",
    "SalaryInfo",
    "Payment",
    "CustomBank",
    "AuditLog",
]
